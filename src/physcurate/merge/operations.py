"""Grid the profile operations of a mission into an xarray Dataset.

Every profile operation (featureType '4') becomes one column of a
(sample, operation) grid. Readings are placed in the row given by their
sampleNumber, so rows line up across operations.

Naming
------
operation metadata    FIELDNAME                              (operation,)
instrument metadata   INSTRUMENTTYPE_FIELDNAME               (operation,)
readings              INSTRUMENTTYPE_PARAMETERCODE           (sample, operation)
quality flags         INSTRUMENTTYPE_PARAMETERCODE_QC        (sample, operation)
parameter metadata    INSTRUMENTTYPE_PARAMETERCODE_FIELDNAME (operation,)

Secondary sensors get their ordinal appended to the parameter code
(e.g. CTD_TEMP2). Mission-level fields become dataset attributes.
"""

import copy
import logging
from typing import Optional

import numpy as np
import pandas as pd
import xarray as xr

from physcurate.model.fields import SchemaProvider, StaticSchemaProvider
from physcurate.model.levels import Context, Level
from physcurate.model.records import Mission, Record
from physcurate.schemas.internal import InternalConfig
from physcurate.merge.readings import assign_sample_numbers, is_merged, merge_readings
from physcurate.valuetype import TIME_TYPES, NUMERIC_TYPES, ValueType, as_text, parse_value_type, to_timestamp

logger = logging.getLogger(__name__)

OPERATION_OMIT = frozenset({"featureType"})
INSTRUMENT_OMIT = frozenset({"instrumentType", "instrumentNumber"})
PARAMETER_OMIT = frozenset({"parameterCode", "parameterNumber", "ordinal",
                            "suppliedParameterName", "suppliedUnits"})

INSTRUMENT_PROPERTIES = {"profileDirection": ValueType.STR}
PARAMETER_PROPERTIES = {
    "calibrationCoordinate": ValueType.STR,
    "calibrationOffset": ValueType.DEC,
    "calibrationSlope": ValueType.DEC,
    "referenceOffset": ValueType.DEC,
    "comment": ValueType.STR,
}


def _numbers(values) -> np.ndarray:
    """Values as floats, NaN where not numeric."""
    return pd.to_numeric(pd.Series(list(values), dtype=object), errors="coerce").to_numpy(dtype=float)


class _Columns:
    """Per-operation metadata columns collected while walking the mission."""

    def __init__(self, count: int):
        self.count = count
        self.values = {}
        self.types = {}

    def put(self, name: str, column: int, value, value_type) -> None:
        if name not in self.values:
            self.values[name] = [None] * self.count
            self.types[name] = parse_value_type(value_type) or ValueType.STR
        self.values[name][column] = value

    def put_fields(self, prefix: str, record: Record, omit, fields, column: int) -> None:
        for name, value in record.fields.items():
            if name in omit or not fields.is_legal(name):
                continue
            self.put(prefix + name.upper(), column, value, fields.value_type(name))

    def put_properties(self, prefix: str, record: Record, wanted: dict, column: int) -> None:
        for entry in record.properties:
            if entry.code in wanted:
                self.put(prefix + entry.code.upper(), column, entry.value, wanted[entry.code])

    def variables(self) -> dict:
        result = {}
        for name, values in self.values.items():
            value_type = self.types[name]
            if value_type in TIME_TYPES:
                data = pd.DatetimeIndex([to_timestamp(v) for v in values]).to_numpy()
            elif value_type in NUMERIC_TYPES:
                data = _numbers(values)
            else:
                data = np.array([as_text(v) for v in values], dtype=str)
            result[name] = ("operation", data)
        return result


def _parameter_name(instrument_type: str, parameter: Record) -> str:
    ordinal = parameter.get("ordinal")
    suffix = ""
    if isinstance(ordinal, (int, float, np.integer, np.floating)) and not pd.isna(ordinal) and ordinal > 1:
        suffix = str(int(ordinal))
    return f"{instrument_type}_{as_text(parameter.get('parameterCode'))}{suffix}"


def operations_to_dataset(mission: Mission, config: InternalConfig,
                          schema: Optional[SchemaProvider] = None) -> xr.Dataset:
    """Gather the profile operations of a mission into one Dataset.

    The mission is not modified; readings are merged on a copy.

    Parameters
    ----------
    mission : Mission
        Mission with readings merged or not.
    config : InternalConfig
        Sort code, sample field and profile featureType from `config.merge`,
        time parameter code from `config.augment`.
    schema : SchemaProvider, optional
        Value types of metadata fields. Defaults to the built-in catalog.

    Returns
    -------
    xr.Dataset
        Dimensions ('sample', 'operation'). The 'operation' coordinate holds
        the operationNumber of each gridded operation.
    """
    schema = schema or StaticSchemaProvider()
    sample_field = config.merge.sample_field
    time_code = config.augment.time_parameter_code

    mission = merge_readings(copy.deepcopy(mission), config.merge.sort_code, sample_field)
    profiles = [
        operation for operation in mission.operations
        if as_text(operation.get("featureType")) == config.merge.profile_feature_type
    ]
    count = len(profiles)

    for operation in profiles:
        for instrument in operation.instruments:
            if not any(sample_field in reading for p in instrument.parameters for reading in p.readings):
                assign_sample_numbers(instrument, sample_field)

    rows = 0
    for operation in profiles:
        for instrument in operation.instruments:
            for parameter in instrument.parameters:
                for reading in parameter.readings:
                    numbers = _numbers(np.atleast_1d(reading.get(sample_field, [])).tolist())
                    if np.isfinite(numbers).any():
                        rows = max(rows, int(np.nanmax(numbers)))

    operation_fields = schema.fields_for(Level.OPERATION, Context.EXPORT)
    instrument_fields = schema.fields_for(Level.INSTRUMENT, Context.EXPORT)
    parameter_fields = schema.fields_for(Level.PARAMETER, Context.EXPORT)

    columns = _Columns(count)
    grids = {}
    for column, operation in enumerate(profiles):
        columns.put_fields("", operation, OPERATION_OMIT, operation_fields, column)

        for instrument in operation.instruments:
            instrument_type = as_text(instrument.get("instrumentType")).upper()
            columns.put_fields(f"{instrument_type}_", instrument, INSTRUMENT_OMIT, instrument_fields, column)
            columns.put_properties(f"{instrument_type}_", instrument, INSTRUMENT_PROPERTIES, column)

            for parameter in instrument.parameters:
                name = _parameter_name(instrument_type, parameter)
                columns.put_fields(f"{name}_", parameter, PARAMETER_OMIT, parameter_fields, column)
                columns.put_properties(f"{name}_", parameter, PARAMETER_PROPERTIES, column)
                if not parameter.readings:
                    continue

                reading = parameter.readings[0] if is_merged(parameter) else None
                if reading is None:
                    values = [r.get("value") for r in parameter.readings]
                    flags = [r.get("quality", "") for r in parameter.readings]
                    numbers = [r.get(sample_field) for r in parameter.readings]
                else:
                    values = np.atleast_1d(reading.get("value", [])).tolist()
                    flags = np.atleast_1d(reading.get("quality", [""] * len(values))).tolist()
                    numbers = np.atleast_1d(reading.get(sample_field, [])).tolist()

                timed = time_code in as_text(parameter.get("parameterCode"))
                if name not in grids:
                    fill = np.datetime64("NaT", "ns") if timed else np.nan
                    grids[name] = np.full((rows, count), fill,
                                          dtype="datetime64[ns]" if timed else float)
                    grids[f"{name}_QC"] = np.full((rows, count), "", dtype="<U1")

                for number, value, flag in zip(_numbers(numbers), values, flags):
                    if np.isnan(number) or number < 1:
                        continue
                    row = int(number) - 1
                    if timed:
                        stamp = to_timestamp(value)
                        grids[name][row, column] = stamp.to_datetime64() if stamp is not None else np.datetime64("NaT")
                    else:
                        grids[name][row, column] = _numbers([value])[0]
                    grids[f"{name}_QC"][row, column] = as_text(flag)[:1]

    data_vars = columns.variables()
    for name, grid in grids.items():
        data_vars[name] = (("sample", "operation"), grid)

    operation_numbers = [operation.get("operationNumber", column + 1) for column, operation in enumerate(profiles)]
    ds = xr.Dataset(
        data_vars,
        coords={
            "sample": np.arange(1, rows + 1),
            "operation": pd.to_numeric(pd.Series(operation_numbers, dtype=object), errors="coerce").to_numpy(),
        },
    )
    ds.attrs.update({name: as_text(value) for name, value in mission.fields.items()})

    logger.info("Gridded %d profile operations into %d variables (%d samples)",
                count, len(ds.data_vars), rows)
    return ds
