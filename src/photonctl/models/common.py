from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class PhotonModel(BaseModel):
    """Base model with permissive extra handling for upstream compatibility."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ParsedState(StrEnum):
    """State enum parsed case-insensitively, with an ``UNKNOWN`` fallback member."""

    @classmethod
    def parse(cls, value: Any) -> ParsedState:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        return cls("UNKNOWN")


class EntityRef(PhotonModel):
    id: str = ""
    kind: str | None = None


class ListResponse(PhotonModel):
    nextPageLink: str | None = None
    previousPageLink: str | None = None
