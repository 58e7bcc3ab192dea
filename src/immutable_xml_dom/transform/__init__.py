"""Transformation layer shared by the native and Clark element kinds."""

from .api import PathUpdate, TransformableElementMixin

__all__ = [
    "PathUpdate",
    "TransformableElementMixin",
]
