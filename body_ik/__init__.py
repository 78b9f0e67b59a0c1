"""Body-frame Newton-Raphson inverse kinematics with per-iteration history."""

from .error_handling import IKErrorCode, IKInputError
from .export import ExportReport, export_history
from .history import IterationHistory, IterationRecord
from .solver import (
    MAX_ITERATIONS,
    IKResult,
    error_twist,
    ik_body_iterates,
    is_error_above_tolerance,
    solve,
)

__all__ = [
    'IKErrorCode',
    'IKInputError',
    'ExportReport',
    'export_history',
    'IterationHistory',
    'IterationRecord',
    'MAX_ITERATIONS',
    'IKResult',
    'error_twist',
    'ik_body_iterates',
    'is_error_above_tolerance',
    'solve',
]
