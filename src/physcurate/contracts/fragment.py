"""Augmentation input contract.

A fragment handed to the augmentation engine carries exactly one new
sample: one operation, one instrument, and one single-sample reading per
parameter.
"""

import numpy as np

from physcurate.contracts.base import require
from physcurate.model.records import Mission


def assert_single_sample_fragment(fragment: Mission) -> None:
    """Enforce the single-sample fragment contract.

    Parameters
    ----------
    fragment : Mission
        New data to be combined with an existing mission.

    Raises
    ------
    ContractViolation
        If the fragment has other than one operation, one instrument, or
        one reading per parameter, or if a reading holds a vector.
    """
    require(
        len(fragment.operations) == 1,
        f"Fragment contract violated: {len(fragment.operations)} operations, expected 1"
    )
    operation = fragment.operations[0]
    require(
        len(operation.instruments) == 1,
        f"Fragment contract violated: {len(operation.instruments)} instruments, expected 1"
    )
    for parameter in operation.instruments[0].parameters:
        code = parameter.get("parameterCode", "")
        require(
            len(parameter.readings) == 1,
            f"Fragment contract violated: parameter '{code}' has "
            f"{len(parameter.readings)} readings, expected 1"
        )
        value = parameter.readings[0].get("value")
        require(
            not isinstance(value, np.ndarray) or value.size == 1,
            f"Fragment contract violated: parameter '{code}' reading holds a vector"
        )
