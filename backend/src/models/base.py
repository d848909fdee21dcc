"""Shared base model for camelCase wire and storage formats."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input and serializes to camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Dump to the camelCase shape stored in the document store."""
        return self.model_dump(by_alias=True, exclude={"id"}, mode="json")


__all__ = ["CamelModel"]
