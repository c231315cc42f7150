"""Shared pydantic bases."""

from pydantic import BaseModel, ConfigDict, ValidationInfo
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Request body accepting camelCase (frontend) or snake_case keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


def reject_null(value, info: ValidationInfo):
    """Field validator body for optional update fields backed by NOT NULL columns.

    Omitting the field leaves the column alone; sending ``null`` is an error.
    """
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value
