from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from skill_sorter.classifier import classify
from skill_sorter.core import (
    ERROR,
    RIGHT,
    ROUND1,
    ROUND2,
    SUMMARY,
    VOTING_STAGES,
    Decision,
    Direction,
    PendingDecision,
    QuadrantSummary,
    Skill,
    Stage,
)
from skill_sorter.deck import shuffle_deck
from skill_sorter.gauge import DEFAULT_MAX_PRESS_MS, PressGauge
from skill_sorter.scheduling import GenerationTimers, ManualScheduler, Scheduler
from skill_sorter.snapshot import (
    SnapshotError,
    build_share_url,
    decode_token,
    encode_summary,
    extract_token,
    strip_token,
)


DEFAULT_ADVANCE_DELAY_MS = 400
DEFAULT_SAMPLE_INTERVAL_MS = 16   # ~60 Hz

Logger = Callable[[str], None]
Observer = Callable[["SkillSorterSession"], None]

_ADVANCE = "advance"
_SAMPLE = "sample"


class SkillSorterSession:
    """
    Owns one walk through the deck: round1 -> round2 -> summary.

    All mutation goes through ``vote``, ``advance``, ``restart`` and snapshot
    ingestion (``ingest``, also used at construction). Deferred work (press
    sampling, the post-vote advance) runs on the injected scheduler and is
    tagged with the session generation, so a restart or a new snapshot makes
    any in-flight callback a no-op.
    """

    def __init__(
        self,
        catalog: Sequence[Skill],
        *,
        token: Optional[str] = None,
        location: Optional[str] = None,
        rng: Optional[np.random.Generator] = None,
        scheduler: Optional[Scheduler] = None,
        max_press_ms: float = DEFAULT_MAX_PRESS_MS,
        advance_delay_ms: int = DEFAULT_ADVANCE_DELAY_MS,
        sample_interval_ms: int = DEFAULT_SAMPLE_INTERVAL_MS,
        auto_advance: bool = True,
        suggest_unknown: bool = True,
        logger: Optional[Logger] = None,
    ) -> None:
        self.catalog: Tuple[Skill, ...] = tuple(catalog)
        self.rng = rng
        self.scheduler: Scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.advance_delay_ms = advance_delay_ms
        self.sample_interval_ms = sample_interval_ms
        self.auto_advance = auto_advance
        self.suggest_unknown = suggest_unknown
        self.logger = logger
        self.location = location

        self._timers = GenerationTimers(self.scheduler)
        self._gauge = PressGauge(max_press_ms)
        self._observers: List[Observer] = []

        self.stage: Stage = ROUND1
        self.current_index = 0
        self.deck: Tuple[Skill, ...] = ()
        self.enjoy_map: Dict[str, Decision] = {}
        self.good_map: Dict[str, Decision] = {}
        self.pending_decision: PendingDecision = None
        self.summary_override: Optional[QuadrantSummary] = None
        self.warnings: Tuple[str, ...] = ()
        self._classified: Optional[QuadrantSummary] = None

        self._reset_walk()

        if token is None and location:
            # an empty ?data= is the same as no parameter
            token = extract_token(location)
            if token is not None and not token.strip():
                token = None
        if token is not None:
            self.ingest(token)

    # ---- read-only views ----

    @property
    def generation(self) -> int:
        return self._timers.generation

    @property
    def current_item(self) -> Optional[Skill]:
        if self.stage not in VOTING_STAGES:
            return None
        if 0 <= self.current_index < len(self.deck):
            return self.deck[self.current_index]
        return None

    @property
    def remaining_count(self) -> int:
        return max(0, len(self.deck) - self.current_index - 1)

    def progress(self, round_: Stage) -> float:
        """Fraction of the deck decided in a round (0..1)."""
        if not self.deck:
            return 0.0
        return len(self._round_map(round_)) / len(self.deck)

    @property
    def is_pressing(self) -> bool:
        return self._gauge.is_pressing

    @property
    def live_power_level(self) -> float:
        return self._gauge.level

    @property
    def press_direction(self) -> Optional[Direction]:
        return self._gauge.direction

    @property
    def summary(self) -> Optional[QuadrantSummary]:
        if self.summary_override is not None:
            return self.summary_override
        if self.stage != SUMMARY:
            return None
        if self._classified is None:
            self._classified = classify(self.deck, self.enjoy_map, self.good_map)
        return self._classified

    def share_token(self) -> Optional[str]:
        summary = self.summary
        return encode_summary(summary) if summary is not None else None

    def share_url(self, base: Optional[str] = None) -> Optional[str]:
        token = self.share_token()
        url = base or self.location
        if token is None or not url:
            return None
        return build_share_url(url, token)

    # ---- observers ----

    def subscribe(self, fn: Observer) -> Callable[[], None]:
        self._observers.append(fn)

        def unsubscribe() -> None:
            try:
                self._observers.remove(fn)
            except ValueError:
                pass

        return unsubscribe

    # ---- decision protocol ----

    def vote(self, is_yes: bool, intensity: float = 0.0) -> bool:
        """Record a decision for the current item. Out-of-protocol calls are ignored."""
        card = self.current_item
        if card is None or self.pending_decision is not None:
            return False

        level = min(100.0, max(0.0, float(intensity)))
        self._round_map(self.stage)[card.name] = Decision(yes=bool(is_yes), intensity=level)
        self.pending_decision = "yes" if is_yes else "no"
        self._stop_press()
        self._log(f"vote {self.stage} {card.name} {self.pending_decision} {level:g}")

        if self.auto_advance:
            self._timers.schedule(_ADVANCE, self.advance_delay_ms, self.advance)
        self._notify()
        return True

    def advance(self) -> bool:
        if self.pending_decision is None:
            return False

        self._timers.cancel(_ADVANCE)
        self.pending_decision = None
        self._stop_press()

        if self.current_index + 1 < len(self.deck):
            self.current_index += 1
        elif self.stage == ROUND1:
            self.stage = ROUND2
            self.current_index = 0
            self._log("round2")
        else:
            self.stage = SUMMARY
            self._classified = None
            self._log("summary")

        self._notify()
        return True

    def tap(self) -> bool:
        """A click with no hold: YES at intensity 0."""
        return self.vote(True, 0.0)

    # ---- hold protocol ----

    def press(self, direction: Direction) -> bool:
        if self.current_item is None or self.pending_decision is not None:
            return False
        if not self._gauge.press(direction, self.scheduler.now_ms()):
            return False
        self._timers.schedule(_SAMPLE, self.sample_interval_ms, self._sample_tick)
        self._notify()
        return True

    def release(self, direction: Direction) -> bool:
        """Commit the hold owned by ``direction``. Returns True if a vote was recorded."""
        if not self._gauge.is_pressing or direction != self._gauge.direction:
            return False
        level = self._gauge.release(direction, self.scheduler.now_ms())
        self._timers.cancel(_SAMPLE)
        if level is None or not self._can_vote():
            self._notify()
            return False
        return self.vote(direction == RIGHT, level)

    def _sample_tick(self) -> None:
        if not self._gauge.is_pressing:
            return
        if not self._can_vote():
            self._stop_press()
            self._log("press cancelled")
            self._notify()
            return
        self._gauge.sample(self.scheduler.now_ms())
        self._timers.schedule(_SAMPLE, self.sample_interval_ms, self._sample_tick)
        self._notify()

    # ---- lifecycle ----

    def restart(self) -> Optional[str]:
        """
        Fresh shuffle, empty maps, no override, back to round1.
        Returns the current location without the data parameter, if a location is known.
        """
        self._timers.bump()
        self._reset_walk()
        self._log("restart")
        if self.location:
            self.location = strip_token(self.location)
        self._notify()
        return self.location

    def ingest(self, token: str) -> Stage:
        """
        Replace the walk with a shared snapshot. Either the summary override is
        fully set (stage summary) or nothing is kept (stage error).
        """
        self._timers.bump()
        self._stop_press()
        self.pending_decision = None

        try:
            decoded = decode_token(token, self.catalog, suggest=self.suggest_unknown)
        except SnapshotError as e:
            self.summary_override = None
            self.warnings = ()
            self.stage = ERROR
            self._log(f"snapshot rejected: {e.status}")
        else:
            self.summary_override = decoded.summary
            self.warnings = decoded.warnings
            self.stage = SUMMARY
            for w in decoded.warnings:
                self._log(w)

        self._notify()
        return self.stage

    # ---- internal ----

    def _reset_walk(self) -> None:
        self.deck = shuffle_deck(self.catalog, self.rng)
        self.enjoy_map = {}
        self.good_map = {}
        self.summary_override = None
        self.warnings = ()
        self._classified = None
        self.stage = ROUND1
        self.current_index = 0
        self.pending_decision = None
        self._gauge.cancel()

    def _round_map(self, round_: Stage) -> Dict[str, Decision]:
        if round_ == ROUND1:
            return self.enjoy_map
        if round_ == ROUND2:
            return self.good_map
        raise ValueError(f"No decisions are recorded in stage '{round_}'")

    def _can_vote(self) -> bool:
        return self.current_item is not None and self.pending_decision is None

    def _stop_press(self) -> None:
        self._gauge.cancel()
        self._timers.cancel(_SAMPLE)

    def _log(self, msg: str) -> None:
        if self.logger:
            self.logger(msg)

    def _notify(self) -> None:
        for fn in list(self._observers):
            fn(self)
