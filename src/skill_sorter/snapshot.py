from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from rapidfuzz import fuzz, process

from skill_sorter.catalog import catalog_index
from skill_sorter.core import QUADRANT_KEYS, IntensityRecord, QuadrantSummary, Skill


QUERY_PARAM = "data"
SUGGEST_MIN_SCORE = 80


class SnapshotError(ValueError):
    """Structured decode failure.

    Attributes
    ----------
    stage:
        Decode step that failed ("base64", "text", "json", "structure").
    reason:
        Failure summary suitable for a status string.
    """

    def __init__(self, stage: str, reason: str) -> None:
        self.stage = stage
        self.reason = reason
        super().__init__(self.status)

    @property
    def status(self) -> str:
        return f"{self.stage}: {self.reason}"


@dataclass(frozen=True)
class DecodedSnapshot:
    summary: QuadrantSummary
    dropped: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()


# ---------------- encode ----------------


def _number(value: float) -> Any:
    # 80.0 -> 80 keeps tokens short; anything fractional stays as-is
    return int(value) if float(value).is_integer() else value


def summary_payload(summary: QuadrantSummary) -> Dict[str, Any]:
    payload: Dict[str, Any] = {key: list(summary.quadrant(key)) for key in QUADRANT_KEYS}
    payload["intensity"] = {
        name: {"enjoy": _number(summary.intensity_of(name).enjoy), "good": _number(summary.intensity_of(name).good)}
        for name in summary.names
    }
    return payload


def encode_summary(summary: QuadrantSummary) -> str:
    """URL-safe base64 of compact UTF-8 JSON, without '=' padding."""
    text = json.dumps(summary_payload(summary), separators=(",", ":"), ensure_ascii=False)
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


# ---------------- decode ----------------


def _decode_record(token: str) -> Any:
    raw = (token or "").strip()
    if not raw:
        raise SnapshotError("base64", "empty token")

    try:
        padded = raw.replace("+", "-").replace("/", "_") + "=" * (-len(raw) % 4)
        data = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise SnapshotError("base64", str(e)) from e

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SnapshotError("text", str(e)) from e

    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise SnapshotError("json", str(e)) from e


def validate_record(record: Any) -> Dict[str, List[str]]:
    """The four quadrant keys are the only load-bearing part of a token."""
    if not isinstance(record, dict):
        raise SnapshotError("structure", f"expected an object, got {type(record).__name__}")

    out: Dict[str, List[str]] = {}
    for key in QUADRANT_KEYS:
        if key not in record:
            raise SnapshotError("structure", f"missing key '{key}'")
        value = record[key]
        if not isinstance(value, list):
            raise SnapshotError("structure", f"'{key}' must be a list")
        if not all(isinstance(n, str) for n in value):
            raise SnapshotError("structure", f"'{key}' must contain only strings")
        out[key] = value
    return out


def intensity_value(entry: Mapping[str, Any], field: str) -> float:
    v = entry.get(field)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return 0.0
    v = float(v)
    if v != v:  # NaN
        return 0.0
    return min(100.0, max(0.0, v))


def _intensity_record(raw_intensity: Any, name: str) -> IntensityRecord:
    if not isinstance(raw_intensity, dict):
        return IntensityRecord()
    entry = raw_intensity.get(name)
    if not isinstance(entry, dict):
        return IntensityRecord()
    return IntensityRecord(enjoy=intensity_value(entry, "enjoy"), good=intensity_value(entry, "good"))


def suggest_name(name: str, candidates: Sequence[str]) -> Optional[str]:
    if not candidates:
        return None
    match = process.extractOne(name, candidates, scorer=fuzz.ratio, score_cutoff=SUGGEST_MIN_SCORE)
    return match[0] if match else None


def decode_token(token: str, catalog: Sequence[Skill], *, suggest: bool = True) -> DecodedSnapshot:
    """
    Parse and validate a token, then rejoin names against ``catalog``.

    Raises SnapshotError on any structural problem. Names the catalog does not
    know are dropped (with a warning), never fatal.
    """
    record = _decode_record(token)
    lists = validate_record(record)
    return _rehydrate(lists, record.get("intensity"), catalog, suggest=suggest)


def _rehydrate(
    lists: Mapping[str, Sequence[str]],
    raw_intensity: Any,
    catalog: Sequence[Skill],
    *,
    suggest: bool,
) -> DecodedSnapshot:
    index = catalog_index(catalog)
    known = list(index)

    kept: Dict[str, List[str]] = {}
    dropped: List[str] = []
    warnings: List[str] = []

    for key in QUADRANT_KEYS:
        names: List[str] = []
        for name in lists[key]:
            if name not in index:
                dropped.append(name)
                hint = suggest_name(name, known) if suggest else None
                warnings.append(f"UNKNOWN_SKILL:{name}:did-you-mean:{hint}" if hint else f"UNKNOWN_SKILL:{name}")
                continue
            if name not in names:
                names.append(name)
        kept[key] = names

    intensity = {name: _intensity_record(raw_intensity, name) for key in QUADRANT_KEYS for name in kept[key]}

    summary = QuadrantSummary(
        superpowers=tuple(kept["superpowers"]),
        growth=tuple(kept["growth"]),
        burnout=tuple(kept["burnout"]),
        avoid=tuple(kept["avoid"]),
        intensity=intensity,
    )
    return DecodedSnapshot(summary=summary, dropped=tuple(dropped), warnings=tuple(warnings))


# ---------------- links ----------------


def base_url(url: str) -> str:
    """origin + path, no query string or fragment."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def build_share_url(url: str, token: str) -> str:
    return f"{base_url(url)}?{urlencode({QUERY_PARAM: token})}"


def extract_token(url_or_query: str) -> Optional[str]:
    text = url_or_query.strip()
    query = urlsplit(text).query if "?" in text else text.lstrip("?")
    for k, v in parse_qsl(query, keep_blank_values=True):
        if k == QUERY_PARAM:
            return v
    return None


def strip_token(url: str) -> str:
    """Drop the data parameter and keep everything else."""
    parts = urlsplit(url)
    query = urlencode([(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != QUERY_PARAM])
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))
