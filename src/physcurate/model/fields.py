"""Field catalog and schema provider.

The schema provider answers, per level and context, which field names are
legal, which are mandatory and what value type each one has. A value type
of None means the value is left in the type it arrives with (reading values,
whose type follows the parameter).

Mandatory identifiers that the database assigns on import (operation,
instrument and parameter numbers, sample numbers and the like) are
exempted from the mandatory set in IMPORT context and become optional.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict

from physcurate.model.levels import Context, Level

logger = logging.getLogger(__name__)


DEFAULT_CATALOG = {
    "mission": {
        "mandatory": {
            "missionType": "STR",
            "startYear": "INT",
            "platform": "STR",
            "missionNumber": "INT",
            "missionStartDate": "DATE",
            "missionStopDate": "DATE",
        },
        "optional": {
            "missionName": "STR",
            "cruise": "STR",
            "platformName": "STR",
            "callSignal": "STR",
            "responsibleLaboratory": "STR",
            "purpose": "STR",
        },
        "additional": {
            "missionTypeName": "STR",
            "responsibleLaboratoryName": "STR",
            "qualityFlagTableName": "STR",
            "flagValues": "STR",
            "flagMeanings": "STR",
        },
        "import_exempt": [],
    },
    "operation": {
        "mandatory": {
            "operationType": "STR",
            "operationNumber": "INT",
            "localCdiId": "STR",
            "operationPlatform": "STR",
            "timeStart": "DATETIME",
            "timeStartQuality": "STR",
            "longitudeStart": "DEC",
            "latitudeStart": "DEC",
            "positionStartQuality": "STR",
            "featureType": "STR",
        },
        "optional": {
            "operationName": "STR",
            "stationType": "STR",
            "timeEnd": "DATETIME",
            "timeEndQuality": "STR",
            "longitudeEnd": "DEC",
            "latitudeEnd": "DEC",
            "positionEndQuality": "STR",
            "logStart": "DEC",
            "logEnd": "DEC",
            "logStartQuality": "STR",
            "logEndQuality": "STR",
            "operationPressure": "DEC",
            "operationPressureQuality": "STR",
            "operationComment": "STR",
            # environmental conditions
            "bottomDepthStart": "DEC",
            "bottomDepthEnd": "DEC",
            "windSpeed": "DEC",
            "windDirection": "DEC",
            "airTemperature": "DEC",
            "wetBulbTemperature": "DEC",
            "airPressureAtSeaLevel": "DEC",
            "surfaceSpecificHumidity": "DEC",
            "surfaceRelativeHumidity": "DEC",
            "surfacePar": "DEC",
            "seaSurfaceTemperature": "DEC",
            "weather": "STR",
            "clouds": "STR",
            "sea": "STR",
            "ice": "STR",
            "significantWaveHeight": "DEC",
        },
        "additional": {
            "operationTypeName": "STR",
            "operationPlatformName": "STR",
            "featureTypeName": "STR",
            "weatherDescription": "STR",
            "cloudsDescription": "STR",
            "seaDescription": "STR",
            "iceDescription": "STR",
            "stationTypeDescription": "STR",
        },
        "import_exempt": ["operationNumber", "localCdiId", "timeStartQuality", "positionStartQuality"],
    },
    "instrument": {
        "mandatory": {
            "instrumentType": "STR",
            "instrumentNumber": "INT",
        },
        "optional": {
            "instrumentDataOwner": "STR",
            "equipment": "STR",
            "instrumentComment": "STR",
        },
        "additional": {
            "instrumentTypeName": "STR",
            "equipmentName": "STR",
            "instrumentDataOwnerName": "STR",
        },
        "import_exempt": ["instrumentNumber"],
    },
    "parameter": {
        "mandatory": {
            "parameterNumber": "INT",
            "parameterCode": "STR",
            "ordinal": "INT",
            "units": "STR",
            "processingLevel": "STR",
            "acquirementMethod": "STR",
        },
        "optional": {
            "sensorSerialNumber": "STR",
            "referenceScale": "STR",
            "nrtqcMethod": "STR",
            "dmqcMethod": "STR",
            "calibrationMethod": "STR",
            "sensorOrientation": "STR",
            "suppliedParameterName": "STR",
            "suppliedUnits": "STR",
            "parameterComment": "STR",
        },
        "additional": {
            "parameterName": "STR",
            "processingLevelName": "STR",
            "acquirementMethodName": "STR",
            "sensorOrientationName": "STR",
            "nrtqcMethodName": "STR",
            "dmqcMethodName": "STR",
            "calibrationMethodName": "STR",
        },
        "import_exempt": ["parameterNumber", "ordinal", "processingLevel"],
    },
    "reading": {
        "mandatory": {
            "sampleNumber": "INT",
            "value": None,
            "quality": "STR",
        },
        "optional": {
            "uncertainty": "DEC",
            "standardDeviation": "DEC",
        },
        "additional": {},
        "import_exempt": ["sampleNumber", "quality"],
    },
}


class LevelFields(BaseModel):
    """Legal field names of one level in one context, with value types."""

    model_config = ConfigDict(frozen=True)

    mandatory: dict[str, Optional[str]]
    optional: dict[str, Optional[str]]
    additional: dict[str, Optional[str]]

    @property
    def legal_names(self) -> frozenset:
        return frozenset(self.mandatory) | frozenset(self.optional) | frozenset(self.additional)

    def is_legal(self, name: str) -> bool:
        return name in self.mandatory or name in self.optional or name in self.additional

    def value_type(self, name: str) -> Optional[str]:
        for group in (self.mandatory, self.optional, self.additional):
            if name in group:
                return group[name]
        return None


class SchemaProvider(ABC):
    """Source of field legality and value types.

    Implementations may load their tables from the PhysChem API
    documentation; the validator only needs `fields_for()`.
    """

    @abstractmethod
    def fields_for(self, level: Level, context: Context) -> LevelFields:
        """Fields of `level` in `context`."""


class StaticSchemaProvider(SchemaProvider):
    """Schema provider backed by an in-memory catalog."""

    def __init__(self, catalog: Optional[dict] = None):
        self.catalog = catalog if catalog is not None else DEFAULT_CATALOG
        self._cache = {}

    def fields_for(self, level: Level, context: Context) -> LevelFields:
        level = Level(level)
        context = Context(context)
        key = (level, context)
        if key not in self._cache:
            entry = self.catalog[level.value]
            mandatory = dict(entry["mandatory"])
            optional = dict(entry["optional"])
            if context is Context.IMPORT:
                for name in entry.get("import_exempt", []):
                    if name in mandatory:
                        optional[name] = mandatory.pop(name)
            self._cache[key] = LevelFields(
                mandatory=mandatory,
                optional=optional,
                additional=dict(entry["additional"]),
            )
            logger.debug("Compiled %s fields for %s context: %d legal names",
                         level.value, context.value, len(self._cache[key].legal_names))
        return self._cache[key]
