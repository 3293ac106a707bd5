"""Record validator for mission aggregates.

Walks a mission top-down and, at every level:

1. drops field names that are not legal for the context,
2. fills repairable defaults (quality flags, processingLevel, codes
   derivable from supplied names),
3. checks that mandatory fields are present and non-empty,
4. coerces every value to its declared type,
5. resolves code fields and reconciles their paired name fields,
6. applies realism checks (dates, coordinates, environmental conditions),
7. validates the property list, and per instrument runs the parameter
   consistency checks.

Defects never raise. They are accumulated as diagnostics; a fatal defect
only decides, at the very end, whether a mission is returned.
"""

import logging
from typing import NamedTuple, Optional

import numpy as np
import pandas as pd

from physcurate.model.fields import SchemaProvider
from physcurate.model.levels import Context
from physcurate.model.records import Instrument, Mission, Operation, Parameter, Reading, Record
from physcurate.reference.resolver import ReferenceResolver
from physcurate.reference.status import LookupResult, LookupStatus
from physcurate.schemas.internal import InternalConfig
from physcurate.validation.diagnostics import DiagnosticLog, Severity
from physcurate.validation.parameters import ALL_TESTS, check_parameters
from physcurate.validation.properties import validate_properties
from physcurate.valuetype import ValueType, as_text, coerce, is_empty, is_missing

logger = logging.getLogger(__name__)

# (mandatory field, supplied field, table): codes derivable from supplier names
SUPPLIED_FIELDS = (
    ("parameterCode", "suppliedParameterName", "suppliedParameter"),
    ("units", "suppliedUnits", "suppliedUnits"),
)


class ValidationResult(NamedTuple):
    """Outcome of one validation.

    `mission` is None when fatal defects remain and ignore mode is off.
    `ok` is False whenever a fatal defect was found.
    """
    mission: Optional[Mission]
    diagnostics: DiagnosticLog
    ok: bool


class _Run:
    """State of one validate() call."""

    def __init__(self, context: Context, add_names: bool):
        self.log = DiagnosticLog()
        self.context = context
        self.add_names = add_names
        self.invalid = False
        self.muted = False
        self.now = pd.Timestamp.now()

    def report(self, text: str, severity: int, path: str, invalidates: bool = False) -> None:
        self.log.emit(text, severity, path, self.muted)
        if invalidates or severity >= Severity.FATAL:
            self.invalid = True


def _is_number(value) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating)) and not np.isnan(value)


def _short(value) -> str:
    if isinstance(value, np.ndarray):
        return f"<array of {value.size}>"
    return repr(value)


def _flag_list(quality) -> list:
    if isinstance(quality, np.ndarray):
        items = quality.ravel().tolist()
    elif isinstance(quality, (list, tuple)):
        items = list(quality)
    else:
        items = [quality]
    return [as_text(item) for item in items]


class RecordValidator:
    """Validate and repair mission records.

    Parameters
    ----------
    config : InternalConfig
        Limits, codesets and reference mappings come from `config.validation`.
    schema : SchemaProvider
        Legal fields and value types per level and context.
    resolver : ReferenceResolver
        Code tables, platform registry and property-type tables.
    """

    def __init__(self, config: InternalConfig, schema: SchemaProvider, resolver: ReferenceResolver):
        self.config = config
        self.schema = schema
        self.resolver = resolver
        self.limits = config.validation
        self.time_code = config.augment.time_parameter_code
        self.max_workers = config.reference.max_workers
        self.earliest = pd.Timestamp(year=self.limits.year_min, month=1, day=1)

        logger.debug("RecordValidator initialized: year_min=%s, sample_operations=%s",
                     self.limits.year_min, self.limits.sample_operations)

    def validate(self, mission, context: Context = Context.EXPORT, add_names: bool = False,
                 ignore_errors: bool = False) -> ValidationResult:
        """Validate `mission` in place.

        Parameters
        ----------
        mission : Mission or dict
            Mission record, or its nested mapping form.
        context : Context
            IMPORT for data on its way into the database, EXPORT for data
            taken from it.
        add_names : bool
            Add absent name fields for resolved codes.
        ignore_errors : bool
            Return the repaired mission even when fatal defects remain.

        Returns
        -------
        ValidationResult
        """
        if isinstance(mission, dict):
            mission = Mission.from_dict(mission)
        run = _Run(Context(context), add_names)
        logger.info("Validating mission %s/%s/%s in %s context (%d operations)",
                    mission.get("missionType", ""), mission.get("startYear", ""),
                    mission.get("platform", ""), run.context.value, len(mission.operations))

        self._validate_mission(mission, run)

        sample = self.sample_indices(len(mission.operations))
        for index, operation in enumerate(mission.operations):
            run.muted = index not in sample
            self._validate_operation(operation, f"mission.operation[{index}]", run)
        run.muted = False

        if run.invalid and not ignore_errors:
            run.report("Mission struct is invalid! No mission returned.", Severity.FATAL, "mission")
            return ValidationResult(None, run.log, False)

        logger.info("Validation finished: %d diagnostics, ok=%s", len(run.log), not run.invalid)
        return ValidationResult(mission, run.log, not run.invalid)

    def sample_indices(self, count: int) -> set:
        """Operation indices shown with full diagnostic detail.

        An evenly spaced subset across the operation list, always including
        the first and the last operation.
        """
        if count == 0:
            return set()
        positions = np.round(np.linspace(0, count - 1, self.limits.sample_operations))
        return set(np.unique(positions).astype(int).tolist())

    # ------------------------------------------------------------------
    # Generic field handling
    # ------------------------------------------------------------------

    def _check_fields(self, record: Record, path: str, run: _Run, prefill=None,
                      value_types: Optional[dict] = None) -> dict:
        """Steps common to every level. Returns timestamps of time fields."""
        fields = self.schema.fields_for(record.level, run.context)

        for name in [name for name in record.fields if not fields.is_legal(name)]:
            del record.fields[name]
            run.report(f"Field name '{name}' is not valid! REMOVED.", Severity.CORRECTED, path)

        if prefill is not None:
            prefill(record, path, run)

        for name in fields.mandatory:
            if name not in record:
                run.report(f"Mandatory field '{name}' missing!", Severity.FATAL, path)
            elif is_empty(record[name]):
                run.report(f"Mandatory field '{name}' cannot be empty!", Severity.FATAL, path)

        stamps = {}
        for name, raw in list(record.fields.items()):
            declared = fields.value_type(name)
            if declared is None:
                declared = (value_types or {}).get(name)
            if declared is None:
                # untyped fields keep the type they arrived with
                continue
            result = coerce(raw, declared)
            if result is None:
                type_name = getattr(declared, "value", declared)
                run.report(f"Value {_short(raw)} of '{name}' is not of type {type_name}!", Severity.FATAL, path)
                continue
            record[name] = result.value
            if result.stamp is not None:
                stamps[name] = result.stamp

        for ref in self.limits.reference_fields.get(record.level.value, []):
            code = record.get(ref.field)
            if is_missing(code):
                continue
            result = self.resolver.lookup(ref.table, code, ref.column)
            self._reconcile(record, ref.name_field, result, f"{ref.field} '{code}'", path, run)

        return stamps

    def _reconcile(self, record: Record, name_field: str, result: LookupResult, label: str,
                   path: str, run: _Run, authoritative: bool = False) -> None:
        """Fill or compare `name_field` with a resolved reference value.

        Existing empty names are filled, existing different names are
        reported and kept (replaced when `authoritative`), absent names are
        added only in add-names mode (always when `authoritative`).
        """
        if result.status >= LookupStatus.CONNECTIVITY_ERROR:
            run.report(f"Unable to check {label}: {result.message}", int(result.status), path, invalidates=True)
            return
        if result.status == LookupStatus.NO_MATCH:
            run.report(f"No reference value for {label}: {result.message}", int(result.status), path)
            return

        name = result.value
        if name_field in record:
            existing = record[name_field]
            if is_empty(existing):
                record[name_field] = name
                run.report(f"Empty {name_field} set to '{name}' based on {label}.", Severity.INFO, path)
            elif as_text(existing) != name:
                if authoritative:
                    record[name_field] = name
                    run.report(f"{name_field} '{existing}' changed to '{name}' based on {label}.",
                               Severity.CORRECTED, path)
                else:
                    run.report(f"{name_field} '{existing}' does not match '{name}' based on {label}! Not changed.",
                               Severity.CORRECTED, path)
        elif run.add_names or authoritative:
            record[name_field] = name
            run.report(f"Added {name_field} '{name}' based on {label}.", Severity.INFO, path)

    def _check_properties(self, record: Record, path: str, run: _Run) -> None:
        if not record.properties:
            return
        table = self.resolver.property_types(record.level)
        record.properties, diagnostics = validate_properties(
            record.properties,
            table,
            self.limits.property_domains,
            f"{path}.{record.level.property_key}",
            self.max_workers,
            run.muted,
        )
        run.log.extend(diagnostics)

    def _check_range(self, record: Record, name: str, limit, path: str, run: _Run) -> None:
        value = record.get(name)
        if _is_number(value) and not limit.contains(value):
            run.report(
                f"{name} = {value} {limit.units} is not realistic! Must be within [{limit.min}, {limit.max}].",
                Severity.FATAL, path
            )

    # ------------------------------------------------------------------
    # Mission level
    # ------------------------------------------------------------------

    def _validate_mission(self, mission: Mission, run: _Run) -> None:
        path = "mission"
        stamps = self._check_fields(mission, path, run, prefill=self._prefill_mission)

        year = mission.get("startYear")
        if _is_number(year) and not (self.limits.year_min <= year <= run.now.year):
            run.report(
                f"startYear {year} is not realistic! Must be within [{self.limits.year_min}, {run.now.year}]. "
                "Value removed.", Severity.FATAL, path
            )
            mission["startYear"] = ""

        start = stamps.get("missionStartDate")
        stop = stamps.get("missionStopDate")
        if start is not None and not (self.earliest <= start <= run.now):
            run.report(f"missionStartDate {mission['missionStartDate']} is not realistic!", Severity.FATAL, path)
        if stop is not None and not (self.earliest <= stop <= run.now):
            run.report(f"missionStopDate {mission['missionStopDate']} is not realistic!", Severity.FATAL, path)
        if start is not None and stop is not None and stop < start:
            run.report("missionStopDate is before missionStartDate!", Severity.FATAL, path)

        platform = mission.get("platform")
        if not is_missing(platform):
            label = f"platform '{platform}'"
            result = self.resolver.lookup_platform_attribute(
                platform, self.limits.platform_name_attribute, start
            )
            self._reconcile(mission, "platformName", result, label, path, run)
            result = self.resolver.lookup_platform_attribute(
                platform, self.limits.call_sign_attribute, start
            )
            self._reconcile(mission, "callSignal", result, label, path, run, authoritative=True)

        self._check_properties(mission, path, run)

    def _prefill_mission(self, mission: Mission, path: str, run: _Run) -> None:
        codes = sorted(self.limits.quality_codes)
        flag_scale = {
            "qualityFlagTableName": self.limits.quality_flag_table_name,
            "flagValues": " ".join(codes),
            "flagMeanings": " ".join(self.limits.quality_codes[code].replace(" ", "_") for code in codes),
        }
        for name, value in flag_scale.items():
            if name in mission and is_empty(mission[name]):
                mission[name] = value
                run.report(f"Empty {name} set to '{value}'.", Severity.INFO, path)

    # ------------------------------------------------------------------
    # Operation level
    # ------------------------------------------------------------------

    def _validate_operation(self, operation: Operation, path: str, run: _Run) -> None:
        stamps = self._check_fields(operation, path, run, prefill=self._prefill_operation)

        start = stamps.get("timeStart")
        end = stamps.get("timeEnd")
        for name, stamp in (("timeStart", start), ("timeEnd", end)):
            if stamp is not None and not (self.earliest <= stamp <= run.now):
                run.report(f"{name} {operation[name]} is not realistic!", Severity.FATAL, path)
        if start is not None and end is not None and end < start:
            run.report("timeEnd is before timeStart!", Severity.FATAL, path)

        bounds = {
            "longitudeStart": self.limits.longitude,
            "longitudeEnd": self.limits.longitude,
            "latitudeStart": self.limits.latitude,
            "latitudeEnd": self.limits.latitude,
            "logStart": self.limits.log,
            "logEnd": self.limits.log,
            "bottomDepthStart": self.limits.bottom_depth,
            "bottomDepthEnd": self.limits.bottom_depth,
        }
        bounds.update(self.limits.condition_limits)
        for name, limit in bounds.items():
            self._check_range(operation, name, limit, path, run)

        log_start, log_end = operation.get("logStart"), operation.get("logEnd")
        if _is_number(log_start) and _is_number(log_end) and log_end < log_start:
            run.report("logEnd is less than logStart!", Severity.FATAL, path)

        platform = operation.get("operationPlatform")
        if not is_missing(platform):
            result = self.resolver.lookup_platform_attribute(
                platform, self.limits.platform_name_attribute, start
            )
            self._reconcile(operation, "operationPlatformName", result,
                            f"operationPlatform '{platform}'", path, run)

        self._check_properties(operation, path, run)

        for index, instrument in enumerate(operation.instruments):
            self._validate_instrument(instrument, f"{path}.instrument[{index}]", run)

    def _prefill_operation(self, operation: Operation, path: str, run: _Run) -> None:
        """Quality flags follow their values: cleared without one, defaulted with one."""
        paired = {}
        for value_field, flag_field in self.limits.quality_pairs.items():
            paired.setdefault(flag_field, []).append(value_field)

        for flag_field, value_fields in paired.items():
            if flag_field not in operation:
                continue
            flag = as_text(operation[flag_field])
            has_value = any(not is_missing(operation.get(name)) for name in value_fields)
            if not has_value:
                if flag:
                    run.report(f"{flag_field} '{flag}' has no value to qualify! Removed.",
                               Severity.CORRECTED, path)
                operation[flag_field] = ""
            elif not flag:
                operation[flag_field] = self.limits.unflagged_code
                run.report(f"Empty {flag_field} set to '{self.limits.unflagged_code}'.", Severity.INFO, path)
            elif flag not in self.limits.quality_codes:
                run.report(f"{flag_field} '{flag}' is not a valid quality flag!", Severity.FATAL, path)
            else:
                operation[flag_field] = flag

    # ------------------------------------------------------------------
    # Instrument, parameter and reading levels
    # ------------------------------------------------------------------

    def _validate_instrument(self, instrument: Instrument, path: str, run: _Run) -> None:
        self._check_fields(instrument, path, run)
        self._check_properties(instrument, path, run)

        for index, parameter in enumerate(instrument.parameters):
            self._validate_parameter(parameter, f"{path}.parameter[{index}]", run)

        tests = self.limits.parameter_tests.get(run.context.value, ALL_TESTS)
        messages, status = check_parameters(instrument, tests)
        if status >= Severity.UNVERIFIABLE:
            severity = Severity.FATAL
        elif status > Severity.INFO:
            severity = Severity.CORRECTED
        else:
            return
        for message in messages:
            run.report(message, severity, path)

    def _validate_parameter(self, parameter: Parameter, path: str, run: _Run) -> None:
        self._check_fields(parameter, path, run, prefill=self._prefill_parameter)
        self._check_properties(parameter, path, run)

        value_types = {}
        if self.time_code in as_text(parameter.get("parameterCode")):
            value_types["value"] = ValueType.DATETIME
        for index, reading in enumerate(parameter.readings):
            self._check_fields(reading, f"{path}.reading[{index}]", run,
                               prefill=self._prefill_reading, value_types=value_types)

    def _prefill_parameter(self, parameter: Parameter, path: str, run: _Run) -> None:
        for target, source, table in SUPPLIED_FIELDS:
            if source not in parameter:
                continue
            supplied = parameter[source]
            current = parameter.get(target, "")
            result = None
            if not is_missing(supplied):
                result = self.resolver.lookup(table, supplied, target)
                if result.status >= LookupStatus.CONNECTIVITY_ERROR:
                    run.report(f"Unable to check {source} '{supplied}': {result.message}",
                               int(result.status), path, invalidates=True)
                    continue
            resolved = result is not None and result.status == LookupStatus.SUCCESS
            if is_missing(current):
                if resolved:
                    parameter[target] = result.value
                    run.report(f"Based on {source} '{supplied}' {target} is set to '{result.value}'.",
                               Severity.CORRECTED, path)
                else:
                    run.report(f"Empty mandatory {target} could not be set from {source} '{supplied}'!",
                               Severity.FATAL, path)
            elif resolved and as_text(current) != result.value:
                run.report(f"Mismatch between {source} '{supplied}' and {target} '{current}'!",
                           Severity.FATAL, path)

        if "processingLevel" in parameter and is_empty(parameter["processingLevel"]):
            flags = set()
            for reading in parameter.readings:
                flags.update(flag for flag in _flag_list(reading.get("quality")) if flag)
            if flags <= {self.limits.unflagged_code, self.limits.missing_code}:
                level = self.limits.default_processing_level
                parameter["processingLevel"] = level
                run.report(f"Empty processingLevel set to '{level}'.", Severity.INFO, path)

    def _prefill_reading(self, reading: Reading, path: str, run: _Run) -> None:
        """Default empty flags and flag missing values."""
        if "quality" not in reading:
            return
        value = reading.get("value")
        quality = reading["quality"]
        vector = isinstance(value, (list, tuple, np.ndarray)) or isinstance(quality, (list, tuple, np.ndarray))
        if isinstance(value, np.ndarray):
            values = value.ravel().tolist()
        elif isinstance(value, (list, tuple)):
            values = list(value)
        else:
            values = [value]

        flags = _flag_list(quality)
        if len(flags) == 1 and len(values) > 1:
            flags = flags * len(values)
        if not any(flags) or is_empty(quality):
            flags = [self.limits.unflagged_code] * len(values)
            run.report(f"Empty quality set to '{self.limits.unflagged_code}'.", Severity.INFO, path)
        elif not all(flags):
            flags = [flag or self.limits.unflagged_code for flag in flags]
            run.report(f"Empty quality flags set to '{self.limits.unflagged_code}'.", Severity.INFO, path)

        invalid = sorted({flag for flag in flags if flag not in self.limits.quality_codes})
        if invalid:
            run.report(f"Quality flags {invalid} are not valid!", Severity.FATAL, path)
            return

        changed = []
        for index, item in enumerate(values):
            if index < len(flags) and isinstance(item, float) and np.isnan(item) \
                    and flags[index] != self.limits.missing_code:
                changed.append(flags[index])
                flags[index] = self.limits.missing_code
        if changed:
            severity = Severity.INFO if set(changed) <= {self.limits.unflagged_code} else Severity.CORRECTED
            run.report(f"{len(changed)} missing values flagged '{self.limits.missing_code}'.", severity, path)

        reading["quality"] = np.array(flags, dtype=str) if vector else flags[0]


def validate_mission(mission, config: InternalConfig, schema: SchemaProvider, resolver: ReferenceResolver,
                     context: Context = Context.EXPORT, add_names: bool = False,
                     ignore_errors: bool = False) -> ValidationResult:
    """Validate a mission with a one-off RecordValidator."""
    validator = RecordValidator(config, schema, resolver)
    return validator.validate(mission, context, add_names, ignore_errors)
