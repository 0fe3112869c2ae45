# exporter.py
from __future__ import annotations

import csv
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .catalog import catalog_index
from .classifier import QUADRANTS, sorted_by_intensity
from .core import QuadrantSummary, Skill


# Quantize to 2 decimals everywhere (HALF_UP for human expectations)
_Q2 = Decimal("0.01")


@dataclass(frozen=True)
class ExportRow:
    quadrant: str         # display title, e.g. "Superpowers"
    name: str
    emoji: str
    enjoy: Decimal
    good: Decimal

    @property
    def total(self) -> Decimal:
        return self.enjoy + self.good


@dataclass(frozen=True)
class ExportResult:
    rows: List[ExportRow]
    warnings: Tuple[str, ...] = ()

    def section(self, quadrant: str) -> List[ExportRow]:
        return [r for r in self.rows if r.quadrant == quadrant]


class ExportError(Exception):
    """Raised when export preconditions fail (e.g., empty summary)."""


def _q2(x: float) -> Decimal:
    try:
        return Decimal(str(x)).quantize(_Q2, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ExportError(f"invalid intensity value: {x!r}") from e


def build_export(
    summary: QuadrantSummary,
    *,
    catalog: Optional[Sequence[Skill]] = None,
    warnings: Sequence[str] = (),
) -> ExportResult:
    """
    Rows in quadrant order, strongest total intensity first inside a quadrant.
    Emoji comes from the catalog when one is given.
    """
    if summary.is_empty:
        raise ExportError("no skills to export")

    index: Dict[str, Skill] = catalog_index(catalog or ())
    rows: List[ExportRow] = []

    for q in QUADRANTS:
        for name in sorted_by_intensity(summary.quadrant(q.key), summary.intensity):
            rec = summary.intensity_of(name)
            skill = index.get(name)
            rows.append(
                ExportRow(
                    quadrant=q.title,
                    name=name,
                    emoji=skill.emoji if skill else "",
                    enjoy=_q2(rec.enjoy),
                    good=_q2(rec.good),
                )
            )

    return ExportResult(rows=rows, warnings=tuple(sorted(set(warnings))))


def to_json(result: ExportResult) -> dict:
    return {
        "quadrants": {
            q.title: [
                {
                    "name": r.name,
                    "emoji": r.emoji,
                    "enjoy": float(r.enjoy),
                    "good": float(r.good),
                    "total": float(r.total),
                }
                for r in result.section(q.title)
            ]
            for q in QUADRANTS
        },
        "warnings": list(result.warnings),
    }


def write_csv_rows(result: ExportResult, w) -> None:
    for q in QUADRANTS:
        w.writerow([f"[{q.title}]"])
        for r in result.section(q.title):
            w.writerow([r.name, format(r.enjoy, ".2f"), format(r.good, ".2f"), format(r.total, ".2f")])
        w.writerow([])

    if result.warnings:
        w.writerow(["[Warnings]"])
        for msg in result.warnings:
            w.writerow([msg])


def write_csv(result: ExportResult, path: Path) -> None:
    path = Path(path)
    with path.open("w", newline="", encoding="utf-8") as f:
        write_csv_rows(result, csv.writer(f))
