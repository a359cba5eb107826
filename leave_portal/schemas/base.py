from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for payloads exchanged with the backend, which speaks camelCase."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
