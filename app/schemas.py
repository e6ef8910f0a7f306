# app/schemas.py
# ------------------------------------------------------------
# Pydantic v2 schemas, organized by domain
# ------------------------------------------------------------
from datetime import datetime
from typing import Annotated, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from app.utils.dates import is_valid_iso, parse_iso, to_iso


def _check_iso_datetime(value: str) -> str:
    if not is_valid_iso(value):
        raise PydanticCustomError("iso_datetime", "Invalid ISO 8601 datetime format")
    return value


# Canonical ``YYYY-MM-DDTHH:mm:ss.sssZ`` timestamp, kept as a string until the
# controller turns it into a datetime.
IsoDatetimeString = Annotated[str, AfterValidator(_check_iso_datetime)]


def _reject_non_numeric(value):
    # Lax int mode would coerce "10" and true; only JSON numbers may reach it.
    if isinstance(value, (str, bool)):
        raise PydanticCustomError("int_type", "Input should be a valid integer")
    return value


# Whole number sent as a JSON number; 10.0 is accepted, 1.5 is not.
Count = Annotated[int, BeforeValidator(_reject_non_numeric)]


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire.

    Input is accepted under the camelCase names only.
    """

    model_config = ConfigDict(alias_generator=to_camel)


# ============================================================
# Events
# ============================================================

class CreateEventRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    # Optional but not nullable: an explicit null is a type error.
    description: str = Field(default=None, min_length=1, max_length=500)
    event_start_datetime: IsoDatetimeString
    event_end_datetime: IsoDatetimeString
    capacity: Count = Field(ge=1)

    @field_validator("event_end_datetime")
    @classmethod
    def _end_after_start(cls, value: str, info: ValidationInfo) -> str:
        start = info.data.get("event_start_datetime")
        if start is not None and parse_iso(start) >= parse_iso(value):
            raise PydanticCustomError(
                "event_period",
                "eventEndDatetime must be after than eventStartDatetime",
            )
        return value


class EventRead(CamelModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    description: Optional[str] = None
    event_start_datetime: datetime
    event_end_datetime: datetime
    capacity: int
    created_at: datetime
    updated_at: datetime

    @field_serializer("event_start_datetime", "event_end_datetime", "created_at", "updated_at")
    def _serialize_instant(self, value: datetime) -> str:
        return to_iso(value)


# ============================================================
# Parrot
# ============================================================

class GetParrotRequest(CamelModel):
    message: str = Field(min_length=1, max_length=20)


class ParrotRead(CamelModel):
    message: str
