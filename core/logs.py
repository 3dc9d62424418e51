"""
core/logs.py -- Logging setup for authgate.

configure_logging() is called once by the application lifespan (and by main.py)
before any component is constructed. It only configures handlers on the
"authgate" logger tree; components never call logging.basicConfig themselves
and never share a module-level logger -- each one is handed a Logger at
construction time (see component_logger()).

Transports:
  console       -- always on, human readable.
  error.log     -- ERROR and above, only when LOG_DIR is set.
  combined.log  -- everything at LOG_LEVEL, only when LOG_DIR is set.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

from __future__ import annotations

import logging
from pathlib import Path

from core.config import Settings

ROOT_LOGGER = "authgate"

_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: Settings) -> logging.Logger:
    """Install console (and optional file) handlers on the authgate logger tree.

    Idempotent: existing handlers are replaced, so calling it again from a
    reloaded worker or a second TestClient does not duplicate every line.
    Returns the configured root "authgate" logger.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(settings.log_level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        errors = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)
        root.addHandler(errors)

        combined = logging.FileHandler(log_dir / "combined.log", encoding="utf-8")
        combined.setFormatter(formatter)
        root.addHandler(combined)

    # Handlers live on "authgate"; do not double-print through the root logger.
    root.propagate = False
    return root


def component_logger(name: str) -> logging.Logger:
    """Return the logger for one component, e.g. component_logger("auth.guard")."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
