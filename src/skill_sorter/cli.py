from __future__ import annotations

import argparse
import csv
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from skill_sorter import api
from skill_sorter.catalog import CATALOG_VARIANTS
from skill_sorter.classifier import QUADRANTS, sorted_by_intensity
from skill_sorter.config import load_app_config
from skill_sorter.exporter import ExportError, build_export, to_json, write_csv, write_csv_rows
from skill_sorter.snapshot import SnapshotError, build_share_url, encode_summary


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="skill-sorter",
        description="Headless utilities for skill sorting sessions and shareable result links.",
    )
    subparsers = ap.add_subparsers(dest="command", required=True)

    decode = subparsers.add_parser("decode", help="Open a shared token or link and print its quadrants.")
    _add_decode_args(decode)
    decode.set_defaults(func=_cmd_decode)

    encode = subparsers.add_parser("encode", help="Encode a summary JSON into a token or share link.")
    _add_encode_args(encode)
    encode.set_defaults(func=_cmd_encode)

    export = subparsers.add_parser("export", help="Export a shared token or link to CSV/JSON.")
    _add_export_args(export)
    export.set_defaults(func=_cmd_export)

    catalog = subparsers.add_parser("catalog", help="List the skills in a catalog.")
    catalog.add_argument("--config", default=None, help="Optional YAML/JSON/TOML config override (merged with pyproject.toml).")
    catalog.add_argument("--variant", choices=sorted(CATALOG_VARIANTS), default=None, help="Built-in catalog (default from config).")
    catalog.set_defaults(func=_cmd_catalog)

    play = subparsers.add_parser("play", help="Run the desktop sorter.")
    play.add_argument("--config", default=None, help="Optional YAML/JSON/TOML config override (merged with pyproject.toml).")
    play.add_argument("--link", default=None, help="Open a shared link instead of a fresh session.")
    play.set_defaults(func=_cmd_play)

    args = ap.parse_args(argv)
    return args.func(args)


# ---------------- CLI subcommands ----------------


def _add_decode_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("token", help="Token, '?data=...' query or full share URL.")
    ap.add_argument("--config", default=None, help="Optional YAML/JSON/TOML config override (merged with pyproject.toml).")
    ap.add_argument("--json", action="store_true", help="Emit JSON (stable schema) instead of text.")
    ap.add_argument("--verbose", "-v", action="store_true", help="Print session log lines to stderr.")
    ap.epilog = _DECODE_EPILOG


def _add_encode_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--from", dest="source", required=True, help="Summary JSON file. Use '-' for stdin.")
    ap.add_argument("--base-url", default=None, help="Print a share link on this base URL instead of the bare token.")


def _add_export_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("token", help="Token, '?data=...' query or full share URL.")
    ap.add_argument("--config", default=None, help="Optional YAML/JSON/TOML config override (merged with pyproject.toml).")
    ap.add_argument("--output", "-o", default=None, help="Output path (CSV). If omitted, CSV is printed to stdout.")
    ap.add_argument("--json", action="store_true", help="Emit export JSON instead of CSV.")


def _cmd_decode(args: argparse.Namespace) -> int:
    try:
        result = api.open_shared(args.token, config_path=Path(args.config) if args.config else None)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    if args.verbose:
        for line in result.logs:
            print(line, file=sys.stderr)

    if args.json:
        print(json.dumps(result.as_json(), indent=2, ensure_ascii=False))
    elif result.summary is None:
        print("Invalid or corrupted link")
    else:
        print(_render_summary(result))

    return 0 if result.ok else 1


def _cmd_encode(args: argparse.Namespace) -> int:
    raw = sys.stdin.read() if args.source == "-" else Path(args.source).read_text(encoding="utf-8")
    try:
        summary = api.summary_from_mapping(json.loads(raw))
    except json.JSONDecodeError as e:
        raise SystemExit(f"Invalid summary JSON: {e}") from e
    except (SnapshotError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 2

    token = encode_summary(summary)
    print(build_share_url(args.base_url, token) if args.base_url else token)
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    app_cfg = load_app_config(override_path=Path(args.config) if args.config else None)
    app_cfg.validate()
    catalog = app_cfg.load_catalog()

    result = api.open_shared(args.token, app_config=app_cfg, catalog=catalog)
    if result.summary is None:
        print("Invalid or corrupted link", file=sys.stderr)
        return 1

    try:
        export_result = build_export(result.summary, catalog=catalog, warnings=result.warnings)
    except ExportError as e:
        print(f"Export failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(to_json(export_result), indent=2, ensure_ascii=False))
        return 0

    if args.output:
        write_csv(export_result, Path(args.output))
    else:
        write_csv_rows(export_result, csv.writer(sys.stdout))
    return 0


def _cmd_catalog(args: argparse.Namespace) -> int:
    app_cfg = load_app_config(override_path=Path(args.config) if args.config else None)
    if args.variant:
        app_cfg = replace(app_cfg, catalog=args.variant, catalog_path=None)
    app_cfg.validate()

    for skill in app_cfg.load_catalog():
        print(f"{skill.emoji} {skill.name}: {skill.description}".strip())
    return 0


def _cmd_play(args: argparse.Namespace) -> int:
    from skill_sorter.app import main as app_main

    return app_main(config_path=Path(args.config) if args.config else None, link=args.link)


def _render_summary(result: api.SharedResult) -> str:
    summary = result.summary
    lines: List[str] = []
    for q in QUADRANTS:
        lines.append(f"{q.title} ({q.subtitle})")
        names = sorted_by_intensity(summary.quadrant(q.key), summary.intensity)
        if not names:
            lines.append("  (none chosen)")
        for name in names:
            total = summary.intensity_of(name).total
            lines.append(f"  {name}  {round(total)}%" if total > 0 else f"  {name}")
    for w in result.warnings:
        lines.append(f"warning: {w}")
    return "\n".join(lines)


_DECODE_EPILOG = """examples:
  skill-sorter decode 'https://example.org/sorter?data=eyJzdXBlcnBvd2VycyI6W119'
  skill-sorter decode eyJzdXBlcnBvd2VycyI6W119 --json

stable JSON schema (decode):
  {
    "stage": "summary" | "error",
    "ok": true | false,
    "quadrants": {"superpowers": [...], "growth": [...], "burnout": [...], "avoid": [...]} | null,
    "intensity": {"<skill>": {"enjoy": n, "good": n, "total": n}} | null,
    "warnings": ["UNKNOWN_SKILL:<name>", ...],
    "logs": ["<session log>", ...]
  }
"""


if __name__ == "__main__":
    raise SystemExit(main())
