from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import yaml

from skill_sorter.core import Skill


class CatalogError(Exception):
    """Raised when a catalog file or catalog contents are unusable."""


# ---------------------------------------------------------------------------
# Built-in catalogs
#
# Skill names are identity keys: snapshot tokens store names only and are
# rejoined against whichever catalog the session was started with.
# ---------------------------------------------------------------------------

FULL_CATALOG: Tuple[Skill, ...] = (
    Skill("Connector", "🤝", "Be the bridge between people or groups."),
    Skill("Quick Switcher", "⚡️", "Adapt fast when things change."),
    Skill("Deep Diver", "🔎", "Break down complex problems logically."),
    Skill("Budget Boss", "💸", "Stretch money or resources wisely."),
    Skill("Info Sorter", "🗂️", "Group or organize people, things, or data."),
    Skill("Data Wrangler", "📊", "Crunch and interpret numbers."),
    Skill("Detail Defender", "🛡️", "Spot errors and keep things precise."),
)

SHORT_CATALOG: Tuple[Skill, ...] = (
    Skill("Connector", "🤝", "Be the bridge between people or groups."),
    Skill("Deep Diver", "🔎", "Break down complex problems logically."),
    Skill("Tech Confident", "💻", "Use software or tools to get stuff done."),
    Skill("Big Picture Thinker", "🧠", "Link ideas together into one clear plan."),
    Skill("People First", "❤️", "Enjoy helping others and solving their problems."),
    Skill("Maker", "🔨", "Design or build new things."),
    Skill("Idea Machine", "💡", "Come up with new ideas or approaches."),
    Skill("Decision Maker", "🎯", "Choose paths and take responsibility."),
    Skill("Teacher", "📚", "Explain things clearly so others learn."),
    Skill("Clear Writer", "✍️", "Write things people understand."),
)

CATALOG_VARIANTS: Mapping[str, Tuple[Skill, ...]] = {
    "full": FULL_CATALOG,
    "short": SHORT_CATALOG,
}
DEFAULT_VARIANT = "full"


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def get_catalog(variant: str = DEFAULT_VARIANT) -> Tuple[Skill, ...]:
    key = variant.strip().lower()
    if key not in CATALOG_VARIANTS:
        raise ValueError(f"Unknown catalog variant '{variant}' (expected one of {sorted(CATALOG_VARIANTS)})")
    return CATALOG_VARIANTS[key]


def catalog_index(skills: Iterable[Skill]) -> Dict[str, Skill]:
    """name -> Skill, first occurrence wins."""
    out: Dict[str, Skill] = {}
    for s in skills:
        out.setdefault(s.name, s)
    return out


def catalog_names(skills: Iterable[Skill]) -> List[str]:
    return [s.name for s in skills]


def _skill_from_mapping(item: Any, ctx: str) -> Skill:
    if not isinstance(item, dict):
        raise CatalogError(f"{ctx}: expected an object, got {type(item).__name__}")
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise CatalogError(f"{ctx}: missing or blank 'name'")
    emoji = item.get("emoji", "")
    description = item.get("description", "")
    if not isinstance(emoji, str) or not isinstance(description, str):
        raise CatalogError(f"{ctx}: 'emoji' and 'description' must be strings")
    return Skill(name=name.strip(), emoji=emoji, description=description)


def load_catalog(path: Path) -> Tuple[Skill, ...]:
    """
    Read a catalog file: a JSON or YAML list of
      {"name": "...", "emoji": "...", "description": "..."}

    The result is validated strictly (no duplicate or blank names).
    """
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            raw = json.loads(text)
        elif suffix in {".yaml", ".yml"}:
            raw = yaml.safe_load(text)
        else:
            raise CatalogError(f"Unsupported catalog format: {path}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CatalogError(f"Could not parse catalog {path}: {e}") from e

    if not isinstance(raw, list):
        raise CatalogError(f"{path.name} must be a list of skills")

    skills = tuple(_skill_from_mapping(item, f"{path.name}[{i}]") for i, item in enumerate(raw))
    validate_catalog(skills, strict=True)
    return skills


# ---------------------------------------------------------------------------
# Validation (run at startup, before a deck is built)
# ---------------------------------------------------------------------------

def validate_catalog(skills: Sequence[Skill], *, strict: bool = True) -> List[str]:
    """
    Validate that:
      - names are non-blank
      - names are unique (they key decisions and snapshot tokens)
    Returns a list of human-readable issues. If strict=True and issues exist, raises CatalogError.
    """
    issues: List[str] = []
    seen: Dict[str, int] = {}

    for idx, s in enumerate(skills):
        if not s.name or not s.name.strip():
            issues.append(f"skill #{idx} has a blank name")
            continue
        if s.name in seen:
            issues.append(f"duplicate skill name '{s.name}' (#{seen[s.name]} and #{idx})")
            continue
        seen[s.name] = idx

    if strict and issues:
        raise CatalogError("Catalog validation failed:\n- " + "\n- ".join(issues))
    return issues
