from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from skill_sorter.config import AppConfig, load_app_config
from skill_sorter.core import ERROR, QUADRANT_KEYS, IntensityRecord, QuadrantSummary, Skill
from skill_sorter.deck import make_rng
from skill_sorter.scheduling import Scheduler
from skill_sorter.session import SkillSorterSession
from skill_sorter.snapshot import SnapshotError, build_share_url, encode_summary, extract_token, intensity_value


@dataclass(frozen=True)
class SharedResult:
    stage: str
    summary: Optional[QuadrantSummary]
    warnings: Tuple[str, ...]
    logs: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return self.stage != ERROR and self.summary is not None

    def as_json(self) -> dict:
        summary = self.summary
        return {
            "stage": self.stage,
            "ok": self.ok,
            "quadrants": {k: list(summary.quadrant(k)) for k in QUADRANT_KEYS} if summary else None,
            "intensity": {
                n: {"enjoy": summary.intensity_of(n).enjoy, "good": summary.intensity_of(n).good, "total": summary.intensity_of(n).total}
                for n in summary.names
            }
            if summary
            else None,
            "warnings": list(self.warnings),
            "logs": list(self.logs),
        }


def _config(app_config: Optional[AppConfig], config_path: Optional[Path]) -> AppConfig:
    cfg = app_config or load_app_config(override_path=Path(config_path) if config_path else None)
    cfg.validate()
    return cfg


def new_session(
    *,
    app_config: Optional[AppConfig] = None,
    config_path: Optional[Path] = None,
    catalog: Optional[Sequence[Skill]] = None,
    token: Optional[str] = None,
    location: Optional[str] = None,
    scheduler: Optional[Scheduler] = None,
    logger: Optional[Callable[[str], None]] = None,
) -> SkillSorterSession:
    cfg = _config(app_config, config_path)
    return SkillSorterSession(
        catalog if catalog is not None else cfg.load_catalog(),
        token=token,
        location=location or cfg.base_url,
        rng=make_rng(cfg.seed),
        scheduler=scheduler,
        max_press_ms=cfg.max_press_ms,
        advance_delay_ms=cfg.advance_delay_ms,
        sample_interval_ms=cfg.sample_interval_ms,
        suggest_unknown=cfg.suggest_unknown,
        logger=logger,
    )


def token_from_arg(value: str) -> str:
    """Accept a bare token, a '?data=...' query or a full share URL."""
    found = extract_token(value)
    return found if found is not None else value.strip()


def open_shared(
    value: str,
    *,
    app_config: Optional[AppConfig] = None,
    config_path: Optional[Path] = None,
    catalog: Optional[Sequence[Skill]] = None,
) -> SharedResult:
    logs: list = []
    session = new_session(
        app_config=app_config,
        config_path=config_path,
        catalog=catalog,
        token=token_from_arg(value),
        logger=logs.append,
    )
    return SharedResult(stage=session.stage, summary=session.summary, warnings=session.warnings, logs=tuple(logs))


def summary_from_mapping(data: Any) -> QuadrantSummary:
    """
    Build a summary from a plain mapping with the four quadrant lists and an
    optional intensity object (the same shape the token carries).
    """
    if not isinstance(data, Mapping):
        raise SnapshotError("structure", "summary must be an object")

    lists = {}
    for key in QUADRANT_KEYS:
        value = data.get(key, [])
        if not isinstance(value, list) or not all(isinstance(n, str) for n in value):
            raise SnapshotError("structure", f"'{key}' must be a list of strings")
        lists[key] = tuple(value)

    raw_intensity = data.get("intensity") or {}
    if not isinstance(raw_intensity, Mapping):
        raise SnapshotError("structure", "'intensity' must be an object")

    intensity = {}
    for key in QUADRANT_KEYS:
        for name in lists[key]:
            entry = raw_intensity.get(name)
            if not isinstance(entry, Mapping):
                entry = {}
            intensity[name] = IntensityRecord(enjoy=intensity_value(entry, "enjoy"), good=intensity_value(entry, "good"))

    return QuadrantSummary(intensity=intensity, **lists)


def share_link(summary: QuadrantSummary, base_url: str) -> str:
    return build_share_url(base_url, encode_summary(summary))
