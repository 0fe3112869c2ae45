from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple


Stage = Literal["round1", "round2", "summary", "error"]
PendingDecision = Optional[Literal["yes", "no"]]
Direction = Literal["left", "right"]

ROUND1: Stage = "round1"
ROUND2: Stage = "round2"
SUMMARY: Stage = "summary"
ERROR: Stage = "error"

VOTING_STAGES: Tuple[str, ...] = (ROUND1, ROUND2)

LEFT: Direction = "left"      # NO
RIGHT: Direction = "right"    # YES

# Fixed keys of the four quadrant lists, in display order.
QUADRANT_KEYS: Tuple[str, ...] = ("superpowers", "growth", "burnout", "avoid")


@dataclass(frozen=True)
class Skill:
    """Catalog entry. ``name`` is the identity key everywhere."""

    name: str
    emoji: str = ""
    description: str = ""


@dataclass(frozen=True)
class Decision:
    """A single vote for one skill in one round."""

    yes: bool
    intensity: float = 0.0    # 0..100


@dataclass(frozen=True)
class IntensityRecord:
    enjoy: float = 0.0
    good: float = 0.0

    @property
    def total(self) -> float:
        return self.enjoy + self.good


@dataclass(frozen=True)
class QuadrantSummary:
    """Result of a completed session (or of a decoded snapshot).

    Invariants
    ----------
    * For a classified session the four lists partition the deck.
    * ``intensity`` has one record per listed name.
    """

    superpowers: Tuple[str, ...] = ()
    growth: Tuple[str, ...] = ()
    burnout: Tuple[str, ...] = ()
    avoid: Tuple[str, ...] = ()
    intensity: Dict[str, IntensityRecord] = field(default_factory=dict)

    def quadrant(self, key: str) -> Tuple[str, ...]:
        if key not in QUADRANT_KEYS:
            raise ValueError(f"Unknown quadrant '{key}'")
        return getattr(self, key)

    def quadrant_of(self, name: str) -> Optional[str]:
        for key in QUADRANT_KEYS:
            if name in self.quadrant(key):
                return key
        return None

    @property
    def names(self) -> Tuple[str, ...]:
        out: list = []
        for key in QUADRANT_KEYS:
            out.extend(self.quadrant(key))
        return tuple(out)

    def intensity_of(self, name: str) -> IntensityRecord:
        return self.intensity.get(name, IntensityRecord())

    @property
    def is_empty(self) -> bool:
        return not self.names
