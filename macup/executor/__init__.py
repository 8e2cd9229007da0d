"""Execution planning and the apply state machine."""

from .apply import (
    ApplyErrors,
    ApplyReport,
    ExecutionContext,
    ManagerFailure,
    PackageFailure,
    SkippedPhase,
    apply_plan,
    can_execute_phase,
    print_summary,
)
from .planner import (
    MANAGERS_PHASE,
    ExecutionPlan,
    Phase,
    create_execution_plan,
    render_plan,
)

__all__ = [
    "MANAGERS_PHASE",
    "Phase",
    "ExecutionPlan",
    "create_execution_plan",
    "render_plan",
    "SkippedPhase",
    "ExecutionContext",
    "ManagerFailure",
    "PackageFailure",
    "ApplyErrors",
    "ApplyReport",
    "can_execute_phase",
    "apply_plan",
    "print_summary",
]
