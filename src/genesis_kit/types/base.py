"""Reusable pydantic base models for genesis and artifact documents."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `chain_id` in a Python model will be
    represented as `chainId` when it is serialized to JSON.

    Both the genesis document and the control-plane wire objects use
    camelCase keys, so every model in the package starts from here.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )


class ImmutableModel(CamelModel):
    """A frozen model that rejects unknown fields."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
    }
