"""
Shared schema building blocks: camelCase-aware base model and versions.
"""
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Semantic version pattern (semver.org, including pre-release and build metadata)
SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class CamelModel(BaseModel):
    """
    Base model accepting both snake_case field names and camelCase aliases.

    Payloads persisted by the rest of the platform use camelCase keys
    (``endingId``, ``idealAnswers``). Dump with ``by_alias=True`` to
    produce the same shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Version(CamelModel):
    """Semantic version with an optional human comment."""

    model_config = ConfigDict(frozen=True)

    semver: str = Field(..., description="Semantic version, e.g. 1.0.0")
    comment: Optional[str] = Field(None, description="Optional release note")

    @field_validator("semver")
    @classmethod
    def validate_semver(cls, value: str) -> str:
        if not SEMVER_PATTERN.match(value):
            raise ValueError(
                "Must be a valid semantic version (e.g., 1.0.0, 2.1.0-alpha.1, 1.0.0+build.123)"
            )
        return value

    def __str__(self) -> str:
        return self.semver
