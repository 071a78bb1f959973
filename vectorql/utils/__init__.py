# Copyright (c) 2026 Beijing Volcano Engine Technology Co., Ltd.
# SPDX-License-Identifier: Apache-2.0
"""Shared utilities."""

from .logger import default_logger, get_logger

__all__ = ["default_logger", "get_logger"]
