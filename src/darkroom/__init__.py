"""Darkroom: non-destructive colour filter chains for 32-bit images."""

from __future__ import annotations

from .color import HexColor, PixelColor
from .config import WashOptions
from .errors import (
    DarkroomError,
    RecipeError,
    ResourceError,
    UseAfterDisposeError,
    ValidationError,
)
from .models import BlackAndWhiteMode, Filter, FilterKind, TintValue
from .negative import Negative
from .recipes import load_recipe, save_recipe
from .session import Darkroom
from .utils.logging import get_logger

__all__ = [
    "BlackAndWhiteMode",
    "Darkroom",
    "DarkroomError",
    "Filter",
    "FilterKind",
    "HexColor",
    "Negative",
    "PixelColor",
    "RecipeError",
    "ResourceError",
    "TintValue",
    "UseAfterDisposeError",
    "ValidationError",
    "WashOptions",
    "get_logger",
    "load_recipe",
    "save_recipe",
]
