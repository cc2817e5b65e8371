"""
conlang/models/base.py -- Shared base model for persisted studio records.

Records are stored with camelCase JSON keys (``evolutionRules``,
``scriptConfig``) while Python code uses snake_case attributes.  All
models are frozen: a change always produces a new object.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StudioModel(BaseModel):
    """Frozen pydantic model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready dict written to storage."""
        return self.model_dump(mode="json", by_alias=True)
