"""Persist filter sequences as JSON recipes.

A recipe stores each filter's kind and the raw value it was created from,
never the precomputed tables.  Loading re-runs normalisation, so a recipe
edited by hand is validated exactly like builder input.
"""

from __future__ import annotations

from enum import Enum
from numbers import Real
from pathlib import Path
from typing import Any, Iterable

from .config import RECIPE_VERSION
from .errors import RecipeError, ValidationError
from .models import Filter, FilterKind
from .utils.jsonio import read_json, write_json


def _encode_raw(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, Real) and not isinstance(value, (bool, int)):
        return float(value)
    return value


def recipe_to_dict(filters: Iterable[Filter]) -> dict[str, Any]:
    entries = []
    for item in filters:
        try:
            kind = FilterKind(item.kind)
        except ValueError:
            raise RecipeError(f"Cannot store filter with unknown kind {item.kind!r}") from None
        entries.append({"kind": kind.name, "value": _encode_raw(item.raw)})
    return {"version": RECIPE_VERSION, "filters": entries}


def recipe_from_dict(data: dict[str, Any]) -> list[Filter]:
    version = data.get("version")
    if version != RECIPE_VERSION:
        raise RecipeError(f"Unsupported recipe version {version!r}")
    entries = data.get("filters")
    if not isinstance(entries, list):
        raise RecipeError("Recipe 'filters' must be a list")

    filters: list[Filter] = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict) or "kind" not in entry:
            raise RecipeError(f"Recipe entry {position} is missing its kind")
        try:
            filters.append(Filter.create(entry["kind"], entry.get("value")))
        except ValidationError as exc:
            raise RecipeError(f"Recipe entry {position} is invalid: {exc}") from exc
    return filters


def save_recipe(path: Path | str, filters: Iterable[Filter]) -> None:
    """Write *filters* to *path* atomically."""

    write_json(Path(path), recipe_to_dict(filters))


def load_recipe(path: Path | str) -> list[Filter]:
    """Return the filters stored at *path*, ready for :meth:`Darkroom.batch`."""

    return recipe_from_dict(read_json(Path(path)))


__all__ = ["load_recipe", "recipe_from_dict", "recipe_to_dict", "save_recipe"]
