"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal
from pydantic import ConfigDict, Field
from physcurate.schemas.base import PhyscurateBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalRangeLimit(PhyscurateBaseModel):
    """Runtime plausibility interval."""
    min: float
    max: float
    units: str

    def contains(self, value) -> bool:
        return self.min <= value <= self.max


class InternalReferenceField(PhyscurateBaseModel):
    """Runtime code-to-name mapping through a reference table."""
    field: str
    table: str
    name_field: str
    column: str


class InternalValidationConfig(PhyscurateBaseModel):
    """Runtime validation settings."""
    year_min: int
    sample_operations: int = Field(ge=1)
    longitude: InternalRangeLimit
    latitude: InternalRangeLimit
    log: InternalRangeLimit
    bottom_depth: InternalRangeLimit
    condition_limits: dict[str, InternalRangeLimit]
    quality_codes: dict[str, str]
    quality_flag_table_name: str
    unflagged_code: str
    missing_code: str
    default_processing_level: str
    quality_pairs: dict[str, str]
    reference_fields: dict[str, list[InternalReferenceField]]
    property_domains: dict[str, list[str]]
    parameter_tests: dict[str, str]
    platform_name_attribute: str
    call_sign_attribute: str


class InternalMergeConfig(PhyscurateBaseModel):
    """Runtime merge settings."""
    sort_code: str
    sample_field: str
    profile_feature_type: str


class InternalAugmentConfig(PhyscurateBaseModel):
    """Runtime augmentation settings."""
    time_parameter_code: str
    max_gap_hours: float = Field(gt=0)


class InternalReferenceConfig(PhyscurateBaseModel):
    """Runtime reference lookup settings."""
    max_workers: int = Field(ge=1)


class InternalLoggingConfig(PhyscurateBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(PhyscurateBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.year_min = config.validation.year_min  # NOT .get()
            self.sort_code = config.merge.sort_code

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    validation: InternalValidationConfig
    merge: InternalMergeConfig
    augment: InternalAugmentConfig
    reference: InternalReferenceConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
