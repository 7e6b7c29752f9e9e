"""
Field Reports API — Shared schema base

JSON on the wire is camelCase; requests may use either camelCase or
snake_case field names.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserSummary(CamelModel):
    id: str
    name: str
    email: str


class MessageResponse(CamelModel):
    message: str
