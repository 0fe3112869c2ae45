from skill_sorter.core.models import (  # noqa: F401
    ERROR,
    LEFT,
    QUADRANT_KEYS,
    RIGHT,
    ROUND1,
    ROUND2,
    SUMMARY,
    VOTING_STAGES,
    Decision,
    Direction,
    IntensityRecord,
    PendingDecision,
    QuadrantSummary,
    Skill,
    Stage,
)

__all__ = [
    "ERROR",
    "LEFT",
    "QUADRANT_KEYS",
    "RIGHT",
    "ROUND1",
    "ROUND2",
    "SUMMARY",
    "VOTING_STAGES",
    "Decision",
    "Direction",
    "IntensityRecord",
    "PendingDecision",
    "QuadrantSummary",
    "Skill",
    "Stage",
]
