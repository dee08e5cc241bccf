from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

V2_SPEC_VERSION = "2.0"


class CardSchema(Enum):
    V1 = "v1"  # flat legacy object
    V2 = "v2"  # {"spec_version": "2.0", "data": {...}}


def _drop_nulls(values: Any) -> Any:
    # null means "not set", let the field default apply
    if values is None:
        return {}
    if isinstance(values, dict):
        return {key: value for key, value in values.items() if value is not None}
    return values


class CharacterMetadata(BaseModel):
    """
    Character card fields. Every field is optional and unknown keys are ignored,
    so both old and new exporters load without complaint. The char_* fields are
    the legacy names some V1 exporters still write.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    alternate_greetings: List[Any] = Field(default_factory=list)
    avatar: str = ""
    character_book: Optional[Any] = None
    character_version: str = ""
    chat: str = ""
    create_date: str = ""
    creator: str = ""
    creator_notes: str = ""
    description: str = ""
    extensions: Dict[str, Any] = Field(default_factory=dict)
    first_mes: str = ""
    mes_example: str = ""
    name: str = ""
    personality: str = ""
    post_history_instructions: str = ""
    scenario: str = ""
    system_prompt: str = ""
    tags: List[str] = Field(default_factory=list)

    char_greeting: str = ""
    example_dialogue: str = ""
    world_scenario: str = ""
    char_persona: str = ""
    char_name: str = ""

    @field_validator("tags", mode="before")
    @classmethod
    def null_tags_are_empty(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ["" if tag is None else tag for tag in value]
        return value

    @model_validator(mode="before")
    @classmethod
    def nulls_mean_unset(cls, values: Any) -> Any:
        return _drop_nulls(values)


class CardEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    spec_version: str = ""
    data: CharacterMetadata = Field(default_factory=CharacterMetadata)

    @model_validator(mode="before")
    @classmethod
    def nulls_mean_unset(cls, values: Any) -> Any:
        return _drop_nulls(values)
