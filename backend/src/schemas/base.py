"""Base schema emitting camelCase JSON, the wire format the web client reads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """BaseModel with camelCase aliases.

    Fields are declared in snake_case; JSON in and out uses camelCase
    (`deleted_count` <-> `deletedCount`). Population by field name stays
    allowed so services can build models with Python names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
