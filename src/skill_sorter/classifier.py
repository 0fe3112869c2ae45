from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from skill_sorter.catalog import catalog_index
from skill_sorter.core import QUADRANT_KEYS, Decision, IntensityRecord, QuadrantSummary, Skill


@dataclass(frozen=True)
class QuadrantInfo:
    key: str
    title: str
    subtitle: str
    color: str


QUADRANTS: Tuple[QuadrantInfo, ...] = (
    QuadrantInfo("superpowers", "Superpowers", "Love & Good", "green"),
    QuadrantInfo("growth", "Growth Zone", "Love & Bad", "blue"),
    QuadrantInfo("burnout", "Burnout Risk", "Hate & Good", "amber"),
    QuadrantInfo("avoid", "Delegate / Avoid", "Hate & Bad", "red"),
)
QUADRANT_INFO: Dict[str, QuadrantInfo] = {q.key: q for q in QUADRANTS}


def quadrant_key(enjoy: bool, good: bool) -> str:
    if enjoy and good:
        return "superpowers"
    if enjoy:
        return "growth"
    if good:
        return "burnout"
    return "avoid"


def classify(
    deck: Sequence[Skill],
    enjoy_map: Mapping[str, Decision],
    good_map: Mapping[str, Decision],
) -> QuadrantSummary:
    """
    Bucket every deck item by (enjoy, good); a missing vote counts as "no"
    with intensity 0. List order follows deck order.
    """
    buckets: Dict[str, List[str]] = {k: [] for k in QUADRANT_KEYS}
    intensity: Dict[str, IntensityRecord] = {}

    for skill in deck:
        enjoy = enjoy_map.get(skill.name)
        good = good_map.get(skill.name)
        key = quadrant_key(bool(enjoy and enjoy.yes), bool(good and good.yes))
        buckets[key].append(skill.name)
        intensity[skill.name] = IntensityRecord(
            enjoy=enjoy.intensity if enjoy else 0.0,
            good=good.intensity if good else 0.0,
        )

    return QuadrantSummary(
        superpowers=tuple(buckets["superpowers"]),
        growth=tuple(buckets["growth"]),
        burnout=tuple(buckets["burnout"]),
        avoid=tuple(buckets["avoid"]),
        intensity=intensity,
    )


def sorted_by_intensity(names: Sequence[str], intensity: Mapping[str, IntensityRecord]) -> List[str]:
    """Highest total first; ties keep their incoming order."""
    return sorted(names, key=lambda n: -(intensity[n].total if n in intensity else 0.0))


def hydrate(summary: QuadrantSummary, catalog: Sequence[Skill]) -> Dict[str, List[Skill]]:
    """quadrant key -> Skill objects, for display. Names missing from the catalog are skipped."""
    index = catalog_index(catalog)
    return {
        key: [index[n] for n in summary.quadrant(key) if n in index]
        for key in QUADRANT_KEYS
    }
