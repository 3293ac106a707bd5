"""Reading merge contract.

Enforces the guarantee that after merging, a parameter holds one reading
whose fields are parallel vectors of one common length.
"""

import numpy as np

from physcurate.contracts.base import require
from physcurate.model.records import Parameter


def assert_merged_readings(parameter: Parameter) -> None:
    """Enforce reading merge contract.

    Called immediately after merging a parameter's readings.

    Parameters
    ----------
    parameter : Parameter
        Parameter whose readings were merged.

    Raises
    ------
    ContractViolation
        If there is more than one reading, a field is not a vector, or the
        vectors differ in length.
    """
    code = parameter.get("parameterCode", "")
    require(
        len(parameter.readings) <= 1,
        f"Merge contract violated: parameter '{code}' has {len(parameter.readings)} reading records"
    )
    if not parameter.readings:
        return

    lengths = {}
    for name, value in parameter.readings[0].fields.items():
        require(
            isinstance(value, np.ndarray) and value.ndim == 1,
            f"Merge contract violated: field '{name}' of parameter '{code}' is not a vector"
        )
        lengths[name] = value.shape[0]

    require(
        len(set(lengths.values())) <= 1,
        f"Merge contract violated: parameter '{code}' has unequal vector lengths {lengths}"
    )
