"""Terminal outcomes of one intake invocation.

Exactly one of these is produced per run. Each knows its HTTP status code
and the JSON body returned to the caller.
"""
from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

DUPLICATE_MESSAGE = "Ticket already exists. Contact admin."


class _Outcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: ClassVar[int]

    def body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Rejected(_Outcome):
    status_code: ClassVar[int] = 400

    status: Literal["rejected"] = "rejected"
    reason: str
    image_key: str = Field(..., serialization_alias="imageKey")


class Duplicate(_Outcome):
    status_code: ClassVar[int] = 409

    status: Literal["duplicate"] = "duplicate"
    identifier: str
    message: str = DUPLICATE_MESSAGE


class Validated(_Outcome):
    status_code: ClassVar[int] = 200

    status: Literal["validated"] = "validated"
    identifier: str
    image_key: str = Field(..., serialization_alias="imageKey")
    width: int
    height: int


class Failed(_Outcome):
    status_code: ClassVar[int] = 500

    status: Literal["error"] = "error"
    message: str


ValidationOutcome = Annotated[
    Union[Rejected, Duplicate, Validated, Failed],
    Field(discriminator="status"),
]
