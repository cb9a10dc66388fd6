"""Logging helpers."""

from session_sentinel.common.logging.logger import get_logger

__all__ = ["get_logger"]
