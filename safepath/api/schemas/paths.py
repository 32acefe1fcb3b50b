from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from safepath.core.path_safety import encode_segments, parse_segments


class PathPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(max_length=4096)

    @field_validator("path")
    @classmethod
    def _reject_unsafe_path(cls, value: str) -> str:
        return encode_segments(parse_segments(value))


class AcceptedPathResponse(BaseModel):
    source: Literal["path", "form", "json"]
    path: str
    segments: list[str]
