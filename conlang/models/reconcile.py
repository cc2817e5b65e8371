"""
conlang/models/reconcile.py -- Merge loaded (possibly legacy) records over defaults.

Reconciliation works at top-level-field granularity:

    - a field present in the loaded record replaces the default;
    - a field that is absent or null keeps the default;
    - lists are replaced wholesale, never merged element by element;
    - fields listed in ``keywise`` are merged key by key over the default
      so that a stored record missing a newer key still gets its default.

Values that no longer validate are undone at the smallest place the error
points to:

    - a bad key inside a list element is removed so its default applies;
      an element that still cannot validate is dropped from its list;
    - a bad key of a ``keywise`` field falls back to its default key;
    - anything else falls back to the default of its top-level field.

Each repair is logged, and one drifted value never costs the rest.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from conlang.models.project import (
    CURRENT_SCHEMA_VERSION,
    KEYWISE_MERGE_FIELDS,
    ProjectData,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Each pass fixes at least one value; nested records need a pass per level.
_MAX_REPAIR_PASSES = 16


def merge_model(defaults: M, loaded: Mapping[str, Any], keywise=frozenset()) -> M:
    """Return a new model of ``type(defaults)`` with *loaded* merged in.

    Parameters
    ----------
    defaults : pydantic.BaseModel
        Canonical default instance.
    loaded : Mapping
        Raw record (JSON keys, i.e. aliases).  Snake_case names are
        accepted as well.
    keywise : collection of str
        Attribute names whose mapping values are merged key by key.
    """
    cls = type(defaults)
    base = defaults.model_dump(mode="json", by_alias=True)
    merged = dict(base)
    keywise_keys = set()

    for name, field in cls.model_fields.items():
        key = field.alias or name
        if name in keywise:
            keywise_keys.add(key)
        if key in loaded:
            value = loaded[key]
        elif name in loaded:
            value = loaded[name]
        else:
            continue
        if value is None:
            continue
        if name in keywise and isinstance(value, Mapping) and isinstance(base.get(key), dict):
            merged[key] = {**base[key], **value}
        else:
            merged[key] = value

    # Repairs edit nested containers; never touch the caller's record.
    merged = copy.deepcopy(merged)
    for _ in range(_MAX_REPAIR_PASSES):
        try:
            return cls.model_validate(merged)
        except ValidationError as exc:
            if not _repair(cls.__name__, merged, base, exc.errors(), keywise_keys):
                break

    logger.error("Could not reconcile %s record; using defaults", cls.__name__)
    return defaults


def _walk(node: Any, path: tuple) -> list[tuple[Any, Any]]:
    """Follow *path* into *node*; return the (container, part) steps that exist."""
    steps = []
    for part in path:
        if isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
            steps.append((node, part))
            node = node[part]
        elif isinstance(node, dict) and part in node:
            steps.append((node, part))
            node = node[part]
        else:
            break
    return steps


def _repair(model_name: str, merged: dict, base: dict, errors: list, keywise_keys: set) -> bool:
    """Undo the values *errors* point to.  Returns False if nothing changed."""
    drops: dict[int, tuple[list, set[int]]] = {}
    changed = False

    for err in errors:
        loc = tuple(err.get("loc") or ())
        if not loc or loc[0] not in merged:
            continue
        key = loc[0]
        where = ".".join(str(p) for p in loc)
        steps = _walk(merged, loc)

        list_steps = [i for i, (container, _) in enumerate(steps) if isinstance(container, list)]
        if list_steps:
            i = list_steps[-1]
            if i + 1 < len(steps) and err.get("type") != "missing":
                element, bad_key = steps[i + 1]
                if bad_key in element:
                    del element[bad_key]
                    logger.warning("Resetting invalid %s value %s", model_name, where)
                    changed = True
            else:
                items, index = steps[i]
                drops.setdefault(id(items), (items, set()))[1].add(index)
            continue

        if key in keywise_keys and len(loc) > 1 and isinstance(merged[key], dict):
            sub = loc[1]
            default = base.get(key) or {}
            if sub in default:
                if merged[key].get(sub) != default[sub]:
                    merged[key][sub] = copy.deepcopy(default[sub])
                    changed = True
            elif sub in merged[key]:
                del merged[key][sub]
                changed = True
            logger.warning("Resetting invalid %s value %s to its default", model_name, where)
            continue

        if key in base:
            if merged[key] != base[key]:
                merged[key] = copy.deepcopy(base[key])
                changed = True
        else:
            merged.pop(key)
            changed = True
        logger.warning("Discarding invalid %s field %s; using default", model_name, key)

    for items, indices in drops.values():
        for index in sorted(indices, reverse=True):
            logger.warning("Dropping invalid %s list item %r", model_name, items[index])
            del items[index]
        changed = True

    return changed


# ------------------------------------------------------------------
# Schema versions
# ------------------------------------------------------------------

def version_tuple(version: Any) -> tuple[int, ...] | None:
    """Parse ``"1.1"`` into ``(1, 1)``.  Returns None for anything unparseable."""
    if not isinstance(version, str) or not version.strip():
        return None
    try:
        return tuple(int(part) for part in version.strip().split("."))
    except ValueError:
        return None


def reconcile_project(loaded: Mapping[str, Any]) -> ProjectData:
    """Build a ProjectData from a stored record, upgrading its schema version.

    A record without a usable ``version`` is legacy: it is merged over the
    defaults and stamped with the current version.  A record from a newer
    schema keeps its version so it is not silently downgraded.
    """
    stored_version = loaded.get("version")
    stored = version_tuple(stored_version)
    current = version_tuple(CURRENT_SCHEMA_VERSION)

    if stored is None:
        logger.info("Legacy project record (no version); merging defaults")
    elif stored > current:
        logger.warning(
            "Project record version %s is newer than supported %s",
            stored_version, CURRENT_SCHEMA_VERSION,
        )

    project = merge_model(ProjectData(), loaded, keywise=KEYWISE_MERGE_FIELDS)

    if stored is not None and stored > current:
        return project.model_copy(update={"version": stored_version})
    if project.version != CURRENT_SCHEMA_VERSION:
        logger.info("Upgrading project record %s -> %s", stored_version, CURRENT_SCHEMA_VERSION)
        return project.model_copy(update={"version": CURRENT_SCHEMA_VERSION})
    return project
