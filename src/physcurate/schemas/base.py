"""Shared Pydantic base for the physcurate config layers.

ParamConfig, UserConfig and InternalConfig all derive from it, so every
layer validates its values the same way.
"""

from pydantic import BaseModel, ConfigDict


class PhyscurateBaseModel(BaseModel):
    """Strict base model.

    Unknown keys are rejected; UserConfig relaxes this. Assignments are
    re-validated, and codes lose surrounding whitespace.
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )
