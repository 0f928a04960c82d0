"""Reusable base models."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """A strict, immutable pydantic base model."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class WireModel(BaseModel):
    """
    An immutable model for data decoded from a remote node.

    Unknown keys are dropped. Nodes add fields to their responses over time
    and those must not break decoding.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")
