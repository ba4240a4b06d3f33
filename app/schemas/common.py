"""Base schema: snake_case in Python, camelCase on the wire."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class PartialUpdate(CamelModel):
    """PUT body: omitted fields stay unchanged, explicit nulls are refused."""

    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("must not be null")
        return v


class MessageResponse(CamelModel):
    success: bool = True
    message: str
