"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
It enforces the shape guarantees callers and engines promise each other.
"""

from physcurate.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce an engine contract.

    Called at engine boundaries to verify the input or output has the
    guaranteed shape. It is fail-fast: no recovery, no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(len(mission.operations) == 1, "Fragment contract: one operation expected")
    >>> require(tests.isdigit(), "Parameter check contract: numeric test selector expected")
    """
    if not condition:
        raise ContractViolation(message)
