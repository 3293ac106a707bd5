"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., SORT_CODE → sort_code, LOG_LEVEL → log_level).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Optional
from pydantic import Field, field_validator
from physcurate.schemas.base import PhyscurateBaseModel


class UserValidationConfig(PhyscurateBaseModel):
    """User-facing validation config."""
    year_min: Optional[int] = None
    sample_operations: Optional[int] = None
    condition_limits: Optional[dict[str, dict]] = None
    quality_flag_table_name: Optional[str] = None
    default_processing_level: Optional[str] = None
    property_domains: Optional[dict[str, list[str]]] = None
    parameter_tests: Optional[dict[str, str]] = None

    @field_validator("parameter_tests", mode="before")
    @classmethod
    def normalize_test_keys(cls, v):
        """Accept IMPORT/EXPORT keys and integer selectors."""
        if isinstance(v, dict):
            return {str(k).lower().strip(): str(t) for k, t in v.items()}
        return v


class UserMergeConfig(PhyscurateBaseModel):
    """User-facing merge config."""
    sort_code: Optional[str] = None
    sample_field: Optional[str] = None
    profile_feature_type: Optional[str] = None


class UserAugmentConfig(PhyscurateBaseModel):
    """User-facing augmentation config."""
    time_parameter_code: Optional[str] = None
    max_gap_hours: Optional[float] = None


class UserConfig(PhyscurateBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            SORT_CODE="DEPTH",
            MAX_GAP_HOURS=12,
            LOG_LEVEL="debug",
        )

        internal = resolve_config(param_cfg, user_cfg)
    """

    # Flat aliases
    sort_code: Optional[str] = Field(None, alias="SORT_CODE")
    time_parameter_code: Optional[str] = Field(None, alias="TIME_PARAMETER_CODE")
    max_gap_hours: Optional[float] = Field(None, alias="MAX_GAP_HOURS")
    year_min: Optional[int] = Field(None, alias="YEAR_MIN")
    sample_operations: Optional[int] = Field(None, alias="SAMPLE_OPERATIONS")
    max_workers: Optional[int] = Field(None, alias="MAX_WORKERS")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    validation: Optional[UserValidationConfig] = None
    merge: Optional[UserMergeConfig] = None
    augment: Optional[UserAugmentConfig] = None

    model_config = PhyscurateBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("max_gap_hours", mode="before")
    @classmethod
    def coerce_gap(cls, v):
        """Accept int or float for the gap."""
        if v is not None:
            return float(v)
        return v

    @field_validator("sort_code", "time_parameter_code", mode="before")
    @classmethod
    def normalize_codes(cls, v):
        """Parameter codes are upper case."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower case level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        validation = {}
        if self.year_min is not None:
            validation["year_min"] = self.year_min
        if self.sample_operations is not None:
            validation["sample_operations"] = self.sample_operations
        if self.validation is not None:
            validation.update(self.validation.model_dump(exclude_none=True))
        if validation:
            overrides["validation"] = validation

        merge = {}
        if self.sort_code is not None:
            merge["sort_code"] = self.sort_code
        if self.merge is not None:
            merge.update(self.merge.model_dump(exclude_none=True))
        if merge:
            overrides["merge"] = merge

        augment = {}
        if self.time_parameter_code is not None:
            augment["time_parameter_code"] = self.time_parameter_code
        if self.max_gap_hours is not None:
            augment["max_gap_hours"] = self.max_gap_hours
        if self.augment is not None:
            augment.update(self.augment.model_dump(exclude_none=True))
        if augment:
            overrides["augment"] = augment

        if self.max_workers is not None:
            overrides["reference"] = {"max_workers": self.max_workers}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
