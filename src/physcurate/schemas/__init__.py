"""Pydantic configuration schemas for physcurate.

This module provides strictly typed configuration models for validation,
reading merge and mission augmentation. All configuration validation,
coercion, and normalization happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
"""

from physcurate.schemas.resolve import resolve_config
from physcurate.schemas.internal import InternalConfig
from physcurate.schemas.param import ParamConfig
from physcurate.schemas.user import UserConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
]
