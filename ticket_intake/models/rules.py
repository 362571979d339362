from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive input."""

    return int(math.floor(value + 0.5))


class RegionFractions(BaseModel):
    """Where the ticket number is printed, as fractions of the image size."""

    model_config = ConfigDict(frozen=True)

    left: float = Field(..., ge=0, lt=1)
    top: float = Field(..., ge=0, lt=1)
    width: float = Field(..., gt=0, le=1)
    height: float = Field(..., gt=0, le=1)

    @model_validator(mode="after")
    def _inside_image(self) -> "RegionFractions":
        if self.left + self.width > 1 or self.top + self.height > 1:
            raise ValueError("region of interest extends past the image border")
        return self


class IntakeRules(BaseModel):
    """Every numeric bound used by the gates and the normalizer.

    The geometry gate and the normalizer both read ``canonical_aspect``
    from here; there is no second copy of the ratio anywhere else.
    """

    model_config = ConfigDict(frozen=True)

    accepted_content_type: str = "image/png"
    min_bytes: int = Field(10_000, ge=0)
    max_bytes: int = Field(5_000_000, gt=0)
    canonical_aspect: float = Field(0.47, gt=0)
    aspect_tolerance: float = Field(0.05, gt=0)
    min_variance: float = Field(500.0, ge=0)
    binarize_threshold: int = Field(180, ge=0, le=255)
    roi: RegionFractions = RegionFractions(left=0.667, top=0.005, width=0.33, height=0.07)
    target_width: int = Field(600, gt=0)
    identifier_strategy: Literal["longest_token", "strip_whitespace"] = "longest_token"
    charset: Literal["digits", "alphanumeric"] = "digits"

    @model_validator(mode="after")
    def _check_bounds(self) -> "IntakeRules":
        if self.min_bytes > self.max_bytes:
            raise ValueError("min_bytes must not exceed max_bytes")
        return self

    @property
    def target_height(self) -> int:
        return round_half_up(self.target_width / self.canonical_aspect)
