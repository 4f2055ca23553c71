"""
Base Pydantic schemas
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def to_document(self) -> dict:
        """Dump only the fields the client actually sent"""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
