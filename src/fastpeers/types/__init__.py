"""Shared model types."""

from .base import StrictBaseModel, WireModel

__all__ = [
    "StrictBaseModel",
    "WireModel",
]
