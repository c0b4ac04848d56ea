"""Custom exceptions for Darkroom."""

from __future__ import annotations


class DarkroomError(Exception):
    """Base exception for the package."""


class ValidationError(DarkroomError, ValueError):
    """A raw filter value or colour specifier cannot be normalised."""


class ResourceError(DarkroomError, BufferError):
    """The pixel buffer could not be locked or exposed for writing."""


class UseAfterDisposeError(DarkroomError, RuntimeError):
    """An operation was attempted on a disposed session or image."""


class RecipeError(DarkroomError):
    """A stored filter recipe is missing, malformed or invalid."""


__all__ = [
    "DarkroomError",
    "RecipeError",
    "ResourceError",
    "UseAfterDisposeError",
    "ValidationError",
]
