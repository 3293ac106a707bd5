"""Centralized failure policy for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing callers to handle engine bugs uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when an engine contract is violated.

    This indicates a programming error, not a defect in the mission data.
    Data defects are reported as diagnostics and never raise.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Caller or engine bug (programmer error)
    - Diagnostic: Defect in the mission record (accumulated, never raised)
    """
    pass
