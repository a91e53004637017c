"""Middleware pipeline and the access log."""

from .base import (
    Middleware,
    MiddlewarePipeline,
    NextHandler,
)
from .logging import LoggingMiddleware, RequestLog


__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
