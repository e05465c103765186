from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Stored and exported documents use camelCase keys; python code uses snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
