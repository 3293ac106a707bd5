"""Reading merge engine.

Exports
-------
merge_readings, merge_parameter_readings : function
    Per-sample readings to parallel vectors
expand_readings : function
    Parallel vectors back to per-sample readings
assign_sample_numbers, next_sample_number : function
    Number samples 1..N in row order; number of the next appended sample
operations_to_dataset : function
    Grid profile operations into an xarray Dataset
"""

from physcurate.merge.readings import (
    merge_readings,
    merge_parameter_readings,
    expand_readings,
    assign_sample_numbers,
    is_merged,
    sample_count,
    last_sample,
    append_sample,
    next_sample_number,
)
from physcurate.merge.operations import operations_to_dataset

__all__ = [
    "merge_readings",
    "merge_parameter_readings",
    "expand_readings",
    "assign_sample_numbers",
    "is_merged",
    "sample_count",
    "last_sample",
    "append_sample",
    "next_sample_number",
    "operations_to_dataset",
]
