from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        str_strip_whitespace = True


class Pagination(CamelModel):
    current: int
    pages: int
    total: int
    limit: int


class MessageResponse(BaseModel):
    message: str
