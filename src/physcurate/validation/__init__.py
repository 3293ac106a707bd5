"""Mission validation.

Exports
-------
RecordValidator, validate_mission : class, function
    Level-by-level validation and repair of a mission
ValidationResult : namedtuple
    (mission, diagnostics, ok)
validate_properties, set_property : function
    Property list checks and editing
check_parameters : function
    Parameter consistency tests per instrument
Diagnostic, DiagnosticLog, Severity : class
    Graded diagnostic stream
"""

from physcurate.validation.diagnostics import Diagnostic, DiagnosticLog, Severity
from physcurate.validation.properties import validate_properties, set_property
from physcurate.validation.parameters import check_parameters, parameter_table
from physcurate.validation.validator import RecordValidator, ValidationResult, validate_mission

__all__ = [
    "Diagnostic",
    "DiagnosticLog",
    "Severity",
    "validate_properties",
    "set_property",
    "check_parameters",
    "parameter_table",
    "RecordValidator",
    "ValidationResult",
    "validate_mission",
]
