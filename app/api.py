"""HTTP route definitions for the dashboard service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import ConnectivityView, DashboardView, PageChangeRequest, SearchRequest
from services.dashboard import DashboardController, build_default_controller
from services.errors import ConnectivityRequired

router = APIRouter()


def get_controller() -> DashboardController:
    return build_default_controller()


def _not_connected(exc: ConnectivityRequired) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get(
    "/api/dashboard",
    response_model=DashboardView,
    summary="Current dashboard view, or demo data while the API is unreachable.",
)
def get_dashboard(
    controller: DashboardController = Depends(get_controller),
) -> DashboardView:
    return DashboardView.from_state(controller.view())


@router.post(
    "/api/dashboard/search",
    response_model=DashboardView,
    summary="Apply filters and load the first page of matching records.",
)
def search_dashboard(
    request: SearchRequest,
    controller: DashboardController = Depends(get_controller),
) -> DashboardView:
    try:
        state = controller.search(request.to_filters())
    except ConnectivityRequired as exc:
        raise _not_connected(exc) from exc
    return DashboardView.from_state(state)


@router.post(
    "/api/dashboard/page",
    response_model=DashboardView,
    summary="Move to another page or change the page size.",
)
def change_page(
    request: PageChangeRequest,
    controller: DashboardController = Depends(get_controller),
) -> DashboardView:
    try:
        state = controller.change_page(request.page, request.size)
    except ConnectivityRequired as exc:
        raise _not_connected(exc) from exc
    return DashboardView.from_state(state)


@router.post(
    "/api/dashboard/reset",
    response_model=DashboardView,
    summary="Reload the current page with the current filters.",
)
def reload_dashboard(
    controller: DashboardController = Depends(get_controller),
) -> DashboardView:
    try:
        state = controller.reload()
    except ConnectivityRequired as exc:
        raise _not_connected(exc) from exc
    return DashboardView.from_state(state)


@router.post(
    "/api/dashboard/clear-filters",
    response_model=DashboardView,
    summary="Restore default filters and drop statistics.",
)
def clear_filters(
    controller: DashboardController = Depends(get_controller),
) -> DashboardView:
    controller.clear_filters()
    return DashboardView.from_state(controller.view())


@router.get(
    "/api/connectivity",
    response_model=ConnectivityView,
    summary="Reachability of the rainfall API.",
)
def get_connectivity(
    controller: DashboardController = Depends(get_controller),
) -> ConnectivityView:
    state = controller.state
    return ConnectivityView(state=state.connectivity, error=state.error)


@router.post(
    "/api/connectivity/retry",
    response_model=DashboardView,
    summary="Probe the rainfall API again and load data if it is reachable.",
)
def retry_connectivity(
    controller: DashboardController = Depends(get_controller),
) -> DashboardView:
    controller.retry_connectivity()
    return DashboardView.from_state(controller.view())


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /api/dashboard for the dashboard view."}
