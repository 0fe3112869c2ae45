from __future__ import annotations

from typing import Callable, Dict, List, Literal, Optional, Tuple

from skill_sorter.core import ROUND1, ROUND2, QuadrantSummary, Skill
from skill_sorter.gauge import power_copy
from skill_sorter.session import SkillSorterSession


FieldName = Literal["stage", "card", "progress", "power", "pending", "summary", "warnings"]
Subscriber = Callable[[object], None]

_FIELDS: Tuple[FieldName, ...] = ("stage", "card", "progress", "power", "pending", "summary", "warnings")


class SorterViewModel:
    """
    Observable view-model for the presentation layer.

    Mirrors a session into seven read-only fields:
      - stage: str
      - card: Optional[Skill]
      - progress: (enjoy_pct, good_pct) in percent
      - power: (is_pressing, level, direction, copy)
      - pending: None | "yes" | "no"
      - summary: Optional[QuadrantSummary]
      - warnings: Tuple[str, ...]
    Subscribers receive a field only when its value changes.
    """

    def __init__(self, session: SkillSorterSession) -> None:
        self.session = session
        self._values: Dict[FieldName, object] = self._snapshot()
        self._subscribers: Dict[FieldName, List[Subscriber]] = {f: [] for f in _FIELDS}
        self._unsubscribe_session = session.subscribe(lambda _s: self.refresh())

    def subscribe(self, field: FieldName, fn: Subscriber) -> Callable[[], None]:
        """
        Subscribe to a field; returns an unsubscribe callable.
        Invokes the callback immediately with the current value.
        """
        if field not in self._subscribers:
            raise ValueError(f"Unknown field '{field}'")

        self._subscribers[field].append(fn)
        fn(self._values[field])

        def unsubscribe() -> None:
            try:
                self._subscribers[field].remove(fn)
            except ValueError:
                pass

        return unsubscribe

    def get(self, field: FieldName) -> object:
        if field not in self._values:
            raise ValueError(f"Unknown field '{field}'")
        return self._values[field]

    def close(self) -> None:
        self._unsubscribe_session()

    # ---- sync ----

    def refresh(self) -> None:
        fresh = self._snapshot()
        for field in _FIELDS:
            if fresh[field] != self._values[field]:
                self._values[field] = fresh[field]
                self._notify(field)

    # ---- internal ----

    def _snapshot(self) -> Dict[FieldName, object]:
        s = self.session
        card: Optional[Skill] = s.current_item
        summary: Optional[QuadrantSummary] = s.summary
        return {
            "stage": s.stage,
            "card": card,
            "progress": (s.progress(ROUND1) * 100.0, s.progress(ROUND2) * 100.0),
            "power": (
                s.is_pressing,
                s.live_power_level,
                s.press_direction,
                power_copy(s.live_power_level, s.press_direction) if s.is_pressing else "Hold for power",
            ),
            "pending": s.pending_decision,
            "summary": summary,
            "warnings": s.warnings,
        }

    def _notify(self, field: FieldName) -> None:
        value = self._values[field]
        for fn in list(self._subscribers[field]):
            fn(value)
