from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelIn(BaseModel):
    """Request bodies: the frontend sends camelCase, snake_case is accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
