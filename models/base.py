from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseGolfModel(BaseModel):
    """Shared configuration."""
    model_config = ConfigDict(validate_assignment=True)


class CamelModel(BaseGolfModel):
    """Model whose wire format uses camelCase keys (mobile client contract)."""
    model_config = ConfigDict(
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
