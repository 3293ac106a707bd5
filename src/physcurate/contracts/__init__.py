"""Engine contracts: fail-fast enforcement of shape invariants.

Contracts fail immediately and loudly when a caller hands an engine input
of the wrong shape, or an engine does not produce its promised output.

Key principle:
- Pydantic validates config correctness
- Contracts validate engine input and output shapes
- Diagnostics report defects in the mission data
"""

from physcurate.contracts.failure import ContractViolation
from physcurate.contracts.base import require
from physcurate.contracts.fragment import assert_single_sample_fragment
from physcurate.contracts.readings import assert_merged_readings

__all__ = [
    "ContractViolation",
    "require",
    "assert_single_sample_fragment",
    "assert_merged_readings",
]
