# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Package logger setup."""

from __future__ import annotations

import logging
import os
import threading

ROOT_LOGGER_NAME = "vectorql"
LOG_LEVEL_ENV = "VECTORQL_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False
_lock = threading.Lock()


def _configure_root() -> None:
    global _configured
    with _lock:
        if _configured:
            return
        root = logging.getLogger(ROOT_LOGGER_NAME)
        level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
        root.setLevel(getattr(logging, level_name, logging.WARNING))
        if not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)
        _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package root logger."""
    _configure_root()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


default_logger = get_logger(ROOT_LOGGER_NAME)
