"""
wholesale_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_active_settings()`` is the ONLY way to obtain settings at runtime.
    No other component reads settings files or environment variables
    directly.

Architecture position:
    Configuration -- sits above ``wholesale_kernel``.  The kernel MUST NEVER
    import from ``wholesale_config``; ``wholesale_config.bridges`` translates
    settings into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from wholesale_config.loader import load_yaml_file, parse_settings
from wholesale_config.schema import Settings

_logger = logging.getLogger("wholesale_kernel.config")

_DEFAULT_SETTINGS_FILE = Path(__file__).parent / "sets" / "default.yaml"

DATABASE_URL_ENV = "DATABASE_URL"


def get_active_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """The ONLY public settings entrypoint.

    Args:
        path: Settings file; defaults to ``wholesale_config/sets/default.yaml``.
        environ: Environment mapping (defaults to ``os.environ``).  A
            non-empty ``DATABASE_URL`` replaces ``database.url``.
    """
    source = Path(path) if path is not None else _DEFAULT_SETTINGS_FILE
    settings = parse_settings(load_yaml_file(source))

    env = os.environ if environ is None else environ
    override = env.get(DATABASE_URL_ENV)
    if override:
        settings = replace(settings, database=replace(settings.database, url=override))

    _logger.info(
        "settings_loaded",
        extra={
            "settings_name": settings.name,
            "settings_file": str(source),
            "database_url_overridden": bool(override),
        },
    )
    return settings


__all__ = ["Settings", "get_active_settings"]
