"""Person model shared by the registry, merger and color resolution."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Person(BaseModel):
    """A person named in one or more shift summaries."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Normalized name slug, e.g. 'john_doe'")
    name: str = Field(..., description="Display name as first seen in the calendar")
    color: str = Field(..., description="Palette color assigned at import (hex)")
    color_override: Optional[str] = Field(default=None, description="User-assigned color (hex)")
