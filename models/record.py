import math
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiRecord(BaseModel):
    """Base for every record exchanged with the REST backend (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def as_number(value):
    """Coerce a wire value to float; None for missing, NaN or non-numeric input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
