import json

import pytest

from skill_sorter.catalog import SHORT_CATALOG
from skill_sorter.config import AppConfig, load_app_config


def test_load_app_config_reads_defaults_from_pyproject(project_root):
    cfg = load_app_config(project_root=project_root)
    cfg.validate()

    assert cfg.catalog == "full"
    assert cfg.catalog_path is None
    assert cfg.max_press_ms == 1000
    assert cfg.advance_delay_ms == 400
    assert cfg.sample_interval_ms == 16
    assert cfg.suggest_unknown is True


def test_load_app_config_json_override(tmp_path, project_root):
    override = tmp_path / "config.json"
    override.write_text(
        json.dumps(
            {
                "catalog": "SHORT",
                "seed": 7,
                "base_url": "https://sorter.example.org/",
                "timing": {"advance_delay_ms": 250},
            }
        ),
        encoding="utf-8",
    )

    cfg = load_app_config(project_root=project_root, override_path=override)
    cfg.validate()

    assert cfg.catalog == "short"
    assert cfg.seed == 7
    assert cfg.base_url == "https://sorter.example.org/"
    assert cfg.advance_delay_ms == 250
    assert cfg.max_press_ms == 1000  # untouched keys keep the pyproject value
    assert cfg.load_catalog() == SHORT_CATALOG


def test_load_app_config_yaml_override_with_catalog_file(tmp_path):
    (tmp_path / "skills.yaml").write_text("- name: Juggler\n- name: Baker\n", encoding="utf-8")
    override = tmp_path / "config.yaml"
    override.write_text("catalog_path: skills.yaml\nsuggest_unknown: false\n", encoding="utf-8")

    cfg = load_app_config(project_root=tmp_path, override_path=override)
    cfg.validate()

    assert cfg.catalog_path == (tmp_path / "skills.yaml").resolve()
    assert cfg.suggest_unknown is False
    assert [s.name for s in cfg.load_catalog()] == ["Juggler", "Baker"]


def test_load_app_config_missing_override(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(project_root=tmp_path, override_path=tmp_path / "missing.json")


def test_load_app_config_rejects_non_mapping_timing(tmp_path):
    override = tmp_path / "config.json"
    override.write_text(json.dumps({"timing": [1, 2]}), encoding="utf-8")

    with pytest.raises(ValueError, match="timing section"):
        load_app_config(project_root=tmp_path, override_path=override)


def test_app_config_validation_reports_every_issue(tmp_path):
    cfg = AppConfig(
        catalog="huge",
        catalog_path=tmp_path / "missing.json",
        advance_delay_ms=0,
        base_url="ftp://nowhere",
    )

    with pytest.raises(ValueError) as exc:
        cfg.validate()

    msg = str(exc.value)
    for key in ("catalog", "catalog_path", "advance_delay_ms", "base_url"):
        assert f"{key}:" in msg


def test_app_config_non_strict_validation_returns_issues(tmp_path):
    cfg = AppConfig(catalog_path=tmp_path / "missing.json")

    assert cfg.validate(strict=False, require_paths=False) == {}
    assert "catalog_path" in cfg.validate(strict=False)
