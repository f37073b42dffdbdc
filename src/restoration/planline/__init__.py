from restoration.planline.editor import PlanLineEditor
from restoration.planline.history import EditHistory, HistoryEntry
from restoration.planline.segments import (
    Circular,
    PlanLine,
    PlanLineSegment,
    SegmentedPlanLine,
    Straight,
    Transition,
    TransitionKind,
)

__all__ = [
    "Circular",
    "EditHistory",
    "HistoryEntry",
    "PlanLine",
    "PlanLineEditor",
    "PlanLineSegment",
    "SegmentedPlanLine",
    "Straight",
    "Transition",
    "TransitionKind",
]
