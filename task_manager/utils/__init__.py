"""Utility functions and helpers."""

from .deadline import request_deadline
from .exceptions import (
    raise_conflict,
    raise_gateway_timeout,
    raise_not_found,
    raise_unauthorized,
)

__all__ = [
    "raise_conflict",
    "raise_gateway_timeout",
    "raise_not_found",
    "raise_unauthorized",
    "request_deadline",
]
