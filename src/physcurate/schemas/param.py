"""ParamConfig: Expert defaults for physcurate.

This module defines the complete default configuration for validation,
merging and augmentation. ALL tunable limits, codesets and table mappings
must have defaults here. No runtime code should define fallback values -
this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal
from pydantic import Field, field_validator, model_validator
from physcurate.schemas.base import PhyscurateBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class RangeLimit(PhyscurateBaseModel):
    """Closed plausibility interval for a numeric field."""
    min: float
    max: float
    units: str = ""

    @model_validator(mode="after")
    def check_order(self):
        """Lower bound must not exceed upper bound."""
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) exceeds max ({self.max})")
        return self


class ReferenceField(PhyscurateBaseModel):
    """A code field resolved through a reference table.

    `name_field` is the paired field reconciled with the resolved value,
    `column` selects which column of the table holds that value.
    """
    field: str
    table: str
    name_field: str
    column: str = "name"


def _default_condition_limits() -> dict:
    return {
        "windSpeed": RangeLimit(min=0, max=99, units="m/s"),
        "windDirection": RangeLimit(min=0, max=360, units="deg T"),
        "airTemperature": RangeLimit(min=-40, max=40, units="degC"),
        "wetBulbTemperature": RangeLimit(min=0, max=35, units="degC"),
        "airPressureAtSeaLevel": RangeLimit(min=800, max=1100, units="mBar"),
        "surfaceSpecificHumidity": RangeLimit(min=0, max=30, units="g/kg"),
        "surfaceRelativeHumidity": RangeLimit(min=0, max=100, units="%"),
        "seaSurfaceTemperature": RangeLimit(min=-2.5, max=40, units="degC"),
        "surfacePar": RangeLimit(min=0, max=2000, units="uE/m^2/s"),
    }


def _default_quality_codes() -> dict:
    # EuroGOOS/SeaDataNet quality flag scale
    return {
        "0": "no quality control",
        "1": "good value",
        "2": "probably good value",
        "3": "probably bad value",
        "4": "bad value",
        "5": "changed value",
        "6": "value below detection",
        "7": "value in excess",
        "8": "interpolated value",
        "9": "missing value",
    }


def _default_quality_pairs() -> dict:
    return {
        "timeStart": "timeStartQuality",
        "timeEnd": "timeEndQuality",
        "longitudeStart": "positionStartQuality",
        "latitudeStart": "positionStartQuality",
        "longitudeEnd": "positionEndQuality",
        "latitudeEnd": "positionEndQuality",
        "operationPressure": "operationPressureQuality",
        "logStart": "logStartQuality",
        "logEnd": "logEndQuality",
    }


def _default_reference_fields() -> dict:
    return {
        "mission": [
            ReferenceField(field="missionType", table="missionType", name_field="missionTypeName"),
            ReferenceField(field="responsibleLaboratory", table="institution",
                           name_field="responsibleLaboratoryName"),
        ],
        "operation": [
            ReferenceField(field="operationType", table="operationType", name_field="operationTypeName"),
            ReferenceField(field="featureType", table="featureType", name_field="featureTypeName"),
            ReferenceField(field="stationType", table="stationtype", name_field="stationTypeDescription",
                           column="description"),
            ReferenceField(field="weather", table="weather", name_field="weatherDescription",
                           column="description"),
            ReferenceField(field="clouds", table="clouds", name_field="cloudsDescription",
                           column="description"),
            ReferenceField(field="sea", table="sea", name_field="seaDescription", column="description"),
        ],
        "instrument": [
            ReferenceField(field="instrumentType", table="instrumentType", name_field="instrumentTypeName"),
            ReferenceField(field="instrumentDataOwner", table="institution",
                           name_field="instrumentDataOwnerName"),
            ReferenceField(field="equipment", table="equipment", name_field="equipmentName"),
        ],
        "parameter": [
            ReferenceField(field="parameterCode", table="parameterDefinition", name_field="parameterName"),
            ReferenceField(field="processingLevel", table="processingLevel", name_field="processingLevelName"),
            ReferenceField(field="acquirementMethod", table="method", name_field="acquirementMethodName"),
            ReferenceField(field="nrtqcMethod", table="method", name_field="nrtqcMethodName"),
            ReferenceField(field="dmqcMethod", table="method", name_field="dmqcMethodName"),
            ReferenceField(field="calibrationMethod", table="method", name_field="calibrationMethodName"),
            ReferenceField(field="sensorOrientation", table="sensorOrientation",
                           name_field="sensorOrientationName"),
        ],
    }


def _default_property_domains() -> dict:
    return {
        "castFrom": ["M", "S"],
        "profileDirection": ["D", "A", "M"],
        "thrusters": ["Y"],
    }


class ValidationConfig(PhyscurateBaseModel):
    """Record validation limits, codesets and reference mappings."""
    year_min: int = Field(1900, ge=0, description="Earliest plausible year for any date field")
    sample_operations: int = Field(7, ge=1, description="Operations shown with full diagnostic detail")
    longitude: RangeLimit = Field(default_factory=lambda: RangeLimit(min=-180, max=180, units="degrees_east"))
    latitude: RangeLimit = Field(default_factory=lambda: RangeLimit(min=-90, max=90, units="degrees_north"))
    log: RangeLimit = Field(default_factory=lambda: RangeLimit(min=0, max=1e5, units="nmi"))
    bottom_depth: RangeLimit = Field(default_factory=lambda: RangeLimit(min=0, max=11e3, units="m"))
    condition_limits: dict[str, RangeLimit] = Field(default_factory=_default_condition_limits)
    quality_codes: dict[str, str] = Field(default_factory=_default_quality_codes)
    quality_flag_table_name: str = "EuroGOOS/SeaDatanet quality flag scale."
    unflagged_code: str = "0"
    missing_code: str = "9"
    default_processing_level: str = "L0"
    quality_pairs: dict[str, str] = Field(default_factory=_default_quality_pairs)
    reference_fields: dict[str, list[ReferenceField]] = Field(default_factory=_default_reference_fields)
    property_domains: dict[str, list[str]] = Field(default_factory=_default_property_domains)
    parameter_tests: dict[str, str] = Field(
        default_factory=lambda: {"import": "125", "export": "1245"}
    )
    platform_name_attribute: str = "Ship name"
    call_sign_attribute: str = "ITU Call Sign"

    @model_validator(mode="after")
    def check_flag_codes(self):
        """Default and missing flags must belong to the quality codeset."""
        for code in (self.unflagged_code, self.missing_code):
            if code not in self.quality_codes:
                raise ValueError(f"flag '{code}' is not in quality_codes")
        return self

    @field_validator("parameter_tests")
    @classmethod
    def check_test_selectors(cls, v):
        """Only tests 1-5 exist."""
        for context, tests in v.items():
            if any(t not in "12345" for t in tests):
                raise ValueError(f"invalid parameter test selector '{tests}' for {context}")
        return v


class MergeConfig(PhyscurateBaseModel):
    """Reading merge configuration."""
    sort_code: str = Field("PRES", description="Anchor parameterCode for instrument-level sorting")
    sample_field: str = "sampleNumber"
    profile_feature_type: str = Field("4", description="featureType of profile operations")


class AugmentConfig(PhyscurateBaseModel):
    """Mission augmentation configuration."""
    time_parameter_code: str = Field("DATETIME", description="Substring identifying the time parameter")
    max_gap_hours: float = Field(24.0, gt=0, description="Gap beyond which a new operation is started")

    @field_validator("max_gap_hours", mode="before")
    @classmethod
    def coerce_gap_to_float(cls, v):
        """Allow int or float for the gap."""
        return float(v)


class ReferenceConfig(PhyscurateBaseModel):
    """Reference lookup configuration."""
    max_workers: int = Field(1, ge=1, description="Threads used for property code lookups")


class LoggingConfig(PhyscurateBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(PhyscurateBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all tunable parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg)

    Runtime code only sees InternalConfig.
    """

    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    augment: AugmentConfig = Field(default_factory=AugmentConfig)
    reference: ReferenceConfig = Field(default_factory=ReferenceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
