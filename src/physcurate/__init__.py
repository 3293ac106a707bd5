"""`physcurate` - curation of PhysChem marine observation missions.

Subpackages:
- schemas: Layered configuration
- model: Mission records, field catalog, comparison
- reference: Reference table lookups
- validation: Record, property and parameter validation
- merge: Reading vectors and gridded datasets
- augment: Incremental mission augmentation
"""

__version__ = "0.1.0"

from physcurate.validation import check_parameters, validate_mission
from physcurate.merge import merge_readings
from physcurate.augment import augment_mission

__all__ = [
    "validate_mission",
    "check_parameters",
    "merge_readings",
    "augment_mission",
]
