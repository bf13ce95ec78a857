from __future__ import annotations

from dataclasses import replace
from typing import Optional

from settings import Settings, get_settings


def load_config(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Settings:
    """Environment settings with per-invocation overrides from the command line."""
    settings = get_settings()
    if base_url:
        settings = replace(settings, api_base_url=base_url.rstrip("/"))
    if timeout is not None and timeout > 0:
        settings = replace(settings, request_timeout=timeout)
    return settings
