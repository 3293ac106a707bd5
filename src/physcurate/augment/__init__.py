"""Mission augmentation engine.

Exports
-------
augment_mission : function
    Add a single-sample fragment to an existing mission
AugmentResult, ChangeFlags, Outcome : class
    Result of one augmentation
"""

from physcurate.augment.mission import AugmentResult, ChangeFlags, Outcome, augment_mission

__all__ = [
    "augment_mission",
    "AugmentResult",
    "ChangeFlags",
    "Outcome",
]
