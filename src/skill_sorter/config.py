from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

try:  # Python <3.11 fallback
    import tomllib  # type: ignore
except ModuleNotFoundError:  # pragma: no cover - fallback path
    import tomli as tomllib  # type: ignore

import yaml

from skill_sorter.catalog import CATALOG_VARIANTS, DEFAULT_VARIANT, CatalogError, get_catalog, load_catalog
from skill_sorter.core import Skill
from skill_sorter.gauge import DEFAULT_MAX_PRESS_MS
from skill_sorter.session import DEFAULT_ADVANCE_DELAY_MS, DEFAULT_SAMPLE_INTERVAL_MS


DEFAULT_BASE_URL = "http://localhost/"


def _load_pyproject_config(project_root: Path) -> Dict[str, Any]:
    pyproject_path = project_root / "pyproject.toml"
    if not pyproject_path.exists():
        return {}

    with pyproject_path.open("rb") as f:
        data = tomllib.load(f)
    return data.get("tool", {}).get("skill_sorter", {}) or {}


def _ensure_mapping(obj: Any, ctx: str) -> Dict[str, Any]:
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ValueError(f"{ctx} must be a mapping/object")
    return obj


def _load_override_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config override not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        return _ensure_mapping(json.loads(path.read_text(encoding="utf-8")), "JSON config")
    if suffix in {".yaml", ".yml"}:
        return _ensure_mapping(yaml.safe_load(path.read_text(encoding="utf-8")), "YAML config")
    if suffix == ".toml":
        with path.open("rb") as f:
            return _ensure_mapping(tomllib.load(f), "TOML config")

    raise ValueError(f"Unsupported config override format: {path}")


def _merge_section(base: Mapping[str, Any], override: Mapping[str, Any], key: str) -> Dict[str, Any]:
    merged = dict(_ensure_mapping(base.get(key), f"{key} section"))
    merged.update(_ensure_mapping(override.get(key), f"{key} section"))
    return merged


def _merge_top(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    merged.update(override)
    merged.pop("timing", None)
    return merged


def _resolve_path(project_root: Path, candidate: Optional[object]) -> Optional[Path]:
    if candidate is None or candidate == "":
        return None
    path = Path(str(candidate))
    if path.is_absolute():
        return path
    return (project_root / path).resolve()


@dataclass(frozen=True)
class AppConfig:
    catalog: str = DEFAULT_VARIANT
    catalog_path: Optional[Path] = None
    max_press_ms: int = DEFAULT_MAX_PRESS_MS
    advance_delay_ms: int = DEFAULT_ADVANCE_DELAY_MS
    sample_interval_ms: int = DEFAULT_SAMPLE_INTERVAL_MS
    base_url: str = DEFAULT_BASE_URL
    seed: Optional[int] = None
    suggest_unknown: bool = True

    def load_catalog(self) -> Tuple[Skill, ...]:
        """The catalog file wins over the built-in variant when both are set."""
        if self.catalog_path is not None:
            return load_catalog(self.catalog_path)
        return get_catalog(self.catalog)

    def validate(self, *, strict: bool = True, require_paths: bool = True) -> Dict[str, str]:
        issues: Dict[str, str] = {}

        if self.catalog.strip().lower() not in CATALOG_VARIANTS:
            issues["catalog"] = f"unknown catalog variant '{self.catalog}'"

        if self.catalog_path is not None and require_paths:
            if not Path(self.catalog_path).exists():
                issues["catalog_path"] = f"path does not exist: {self.catalog_path}"
            else:
                try:
                    load_catalog(self.catalog_path)
                except CatalogError as e:
                    issues["catalog_path"] = str(e)

        for label, value in (
            ("max_press_ms", self.max_press_ms),
            ("advance_delay_ms", self.advance_delay_ms),
            ("sample_interval_ms", self.sample_interval_ms),
        ):
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                issues[label] = f"{label} must be a positive integer"

        if not self.base_url.startswith(("http://", "https://")):
            issues["base_url"] = "base_url must be an http(s) URL"

        if self.seed is not None and (not isinstance(self.seed, int) or isinstance(self.seed, bool)):
            issues["seed"] = "seed must be an integer"

        if not isinstance(self.suggest_unknown, bool):
            issues["suggest_unknown"] = "suggest_unknown must be a bool"

        if strict and issues:
            details = "\n- ".join(f"{k}: {v}" for k, v in issues.items())
            raise ValueError("Config validation failed:\n- " + details)
        return issues

    @classmethod
    def _from_maps(
        cls,
        *,
        project_root: Path,
        top: Mapping[str, Any],
        timing: Mapping[str, Any],
    ) -> "AppConfig":
        seed = top.get("seed")
        suggest_unknown = top.get("suggest_unknown")

        return cls(
            catalog=str(top.get("catalog", DEFAULT_VARIANT)).lower(),
            catalog_path=_resolve_path(project_root, top.get("catalog_path")),
            max_press_ms=int(timing.get("max_press_ms", DEFAULT_MAX_PRESS_MS)),
            advance_delay_ms=int(timing.get("advance_delay_ms", DEFAULT_ADVANCE_DELAY_MS)),
            sample_interval_ms=int(timing.get("sample_interval_ms", DEFAULT_SAMPLE_INTERVAL_MS)),
            base_url=str(top.get("base_url", DEFAULT_BASE_URL)),
            seed=None if seed is None else int(seed),
            suggest_unknown=bool(True if suggest_unknown is None else suggest_unknown),
        )


def load_app_config(*, project_root: Optional[Path] = None, override_path: Optional[Path] = None) -> AppConfig:
    root = Path(project_root) if project_root else Path.cwd()

    base = _load_pyproject_config(root)
    override = _load_override_file(override_path) if override_path else {}

    top = _merge_top(base, override)
    timing = _merge_section(base, override, "timing")

    return AppConfig._from_maps(project_root=root, top=top, timing=timing)
