"""Consistency checks across the parameters of one instrument.

Tests
-----
1. Every parameter has a parameterCode.
2. Every parameter has units.
3. Every parameter has a parameterNumber, and they are unique.
4. (parameterCode, ordinal) is unique.
5. Among parameters with a sensorSerialNumber,
   (parameterCode, units, sensorSerialNumber, referenceScale) is unique.

Failure of test 1 or 2 makes the remaining tests meaningless: the check
stops with status FATAL. Failures of tests 3-5 are consistency warnings
and give status CORRECTED; the caller decides how severe they are.
"""

import logging

import pandas as pd

from physcurate.contracts import require
from physcurate.model.records import Instrument
from physcurate.validation.diagnostics import Severity
from physcurate.valuetype import as_text, is_missing

logger = logging.getLogger(__name__)

ALL_TESTS = "12345"
TABLE_COLUMNS = ["parameterNumber", "parameterCode", "units", "sensorSerialNumber", "referenceScale", "ordinal"]


def parameter_table(instrument: Instrument) -> pd.DataFrame:
    """Identity fields of every parameter as text, sorted by parameterNumber.

    Absent fields are empty strings. Parameters without a numeric
    parameterNumber keep their relative order after the numbered ones.
    """
    rows = [[as_text(p.get(column)) for column in TABLE_COLUMNS] for p in instrument.parameters]
    table = pd.DataFrame(rows, columns=TABLE_COLUMNS)
    order = pd.to_numeric(table["parameterNumber"], errors="coerce")
    table = table.assign(_order=order).sort_values("_order", kind="stable", na_position="last")
    return table.drop(columns="_order").reset_index(drop=True)


def check_parameters(instrument: Instrument, tests: str = ALL_TESTS):
    """Cross-check the parameters of one instrument.

    Parameters
    ----------
    instrument : Instrument
        Instrument whose parameters are checked. Readings are not used.
    tests : str
        Digits of the tests to run, e.g. '125'. An empty string runs none.

    Returns
    -------
    messages : list of str
        One message per failing parameter, naming its parameterCode.
    status : Severity
        INFO when all selected tests pass, FATAL when test 1 or 2 fails,
        CORRECTED when only tests 3-5 fail.

    Raises
    ------
    ContractViolation
        If `tests` contains anything but the digits 1-5.
    """
    tests = str(tests)
    require(all(t in ALL_TESTS for t in tests), f"Parameter check contract violated: unknown tests '{tests}'")

    messages = []
    parameters = instrument.parameters

    if "1" in tests:
        for number, parameter in enumerate(parameters, start=1):
            if is_missing(parameter.get("parameterCode")):
                messages.append(
                    f"mandatory parameterCode value ({number}) is missing (inconsistency checks are impossible)"
                )
    if "2" in tests:
        for number, parameter in enumerate(parameters, start=1):
            if is_missing(parameter.get("units")):
                messages.append(f"mandatory units value ({number}) is missing")
    if messages:
        return messages, Severity.FATAL

    table = parameter_table(instrument)

    if "3" in tests:
        missing = table[table["parameterNumber"] == ""]
        for code in missing["parameterCode"]:
            messages.append(f"mandatory parameterNumber of {code} is missing")
        numbered = table[table["parameterNumber"] != ""]
        duplicated = numbered[numbered.duplicated(subset=["parameterNumber"], keep="first")]
        for _, row in duplicated.iterrows():
            messages.append(f"parameterNumber {row['parameterNumber']} of {row['parameterCode']} is not unique")

    if "4" in tests:
        duplicated = table[table.duplicated(subset=["parameterCode", "ordinal"], keep="first")]
        for code in duplicated["parameterCode"]:
            messages.append(f"ordinals of {code} not unique")

    if "5" in tests:
        with_serial = table[table["sensorSerialNumber"] != ""]
        duplicated = with_serial[with_serial.duplicated(
            subset=["parameterCode", "units", "sensorSerialNumber", "referenceScale"], keep="first"
        )]
        for _, row in duplicated.iterrows():
            messages.append(
                f"serialnumber of {row['parameterCode']} with parameterNumber "
                f"{row['parameterNumber']} is duplicated"
            )

    if messages:
        logger.debug("Parameter consistency: %d problems in %s", len(messages),
                     instrument.get("instrumentType", "instrument"))
        return messages, Severity.CORRECTED
    return messages, Severity.INFO
