from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ObjectRef(BaseModel):
    """A storage object named by the trigger."""

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)

    @property
    def file_name(self) -> str:
        return self.key.rsplit("/", 1)[-1]


class ImageAsset(BaseModel):
    """Raw upload as fetched from storage; read-only for the whole invocation."""

    model_config = ConfigDict(frozen=True)

    ref: ObjectRef
    data: bytes
    content_type: str
    width: int | None = None  # set once the geometry gate has decoded the header
    height: int | None = None

    @property
    def size(self) -> int:
        return len(self.data)


class QualityMetrics(BaseModel):
    mean: float
    variance: float


class RegionOfInterest(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: int = Field(..., ge=0)
    top: int = Field(..., ge=0)
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Pillow crop box (left, upper, right, lower)."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)
