"""
Application Security Scoring Engine — Command line entry point

Usage:
    python -m appsec_scoring score apps.json                   # score and write reports
    python -m appsec_scoring score apps.csv --formats json csv
    python -m appsec_scoring --scoring-dir ./scoring-tables score apps.json
    python -m appsec_scoring score apps.json --scoring-dir ./scoring-tables
    python -m appsec_scoring score apps.json --no-history

Lookups:
    python -m appsec_scoring levels                            # integration level options
    python -m appsec_scoring history <application-id>          # stored score trail
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

from . import __version__
from .config import EngineConfig
from .history import ScoreHistory
from .loader import load_applications
from .reporting import export_csv, export_json, export_markdown
from .scoring import (
    ScoringError,
    ScoringTables,
    integration_level_options,
    score_application,
)
from .scoring.models import ScoredApplication

logger = logging.getLogger("appsec_scoring")


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------

def _cmd_score(args: argparse.Namespace, config: EngineConfig) -> int:
    tables = ScoringTables.load(config.scoring_path)
    applications = load_applications(args.input)
    if not applications:
        print(f"  ⚠  No applications found in {args.input}")
        return 0

    run_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:8]
    now = datetime.now(timezone.utc)

    history = None
    if config.history.enabled:
        history = ScoreHistory(config.history.db_path)

    print(f"\n📋 Run ID:  {run_id}")
    print(f"📂 Output:  {config.output.run_dir.resolve()}")
    print(f"🧮 Scoring {len(applications)} application(s)\n")

    scored: list[ScoredApplication] = []
    for app in applications:
        s = score_application(app, tables, now)
        scored.append(s)
        label = str(app.name or app.id or "(unnamed)")
        print(f"  {label:40s} knowledge {s.result.knowledge_score:2d}/50  "
              f"tools {s.result.tool_score:2d}/50  "
              f"total {s.result.total_score:3d}/100  ({s.rating})")
        if history is not None:
            if app.id:
                history.record(app.id, s.result, now)
            else:
                logger.warning(f"Application {label!r} has no id, score not recorded")

    print()
    created = generate_reports(scored, config, run_id)
    print(f"\n  Files: {len(created)} reports generated")
    return 0


def _cmd_levels(args: argparse.Namespace, config: EngineConfig) -> int:
    tables = ScoringTables.load(config.scoring_path)
    options = integration_level_options(tables)
    print(f"\n  {'Level':<8s} {'Weight':<8s} Label")
    print(f"  {'─'*8} {'─'*8} {'─'*40}")
    for opt in options:
        weight = tables.integration_levels[opt["value"]].weight
        print(f"  {opt['value']:<8s} {weight:<8.2f} {opt['label']}")
    print()
    return 0


def _cmd_history(args: argparse.Namespace, config: EngineConfig) -> int:
    store = ScoreHistory(config.history.db_path)
    rows = store.history(args.application_id, limit=args.limit)
    if not rows:
        print(f"  No scores recorded for '{args.application_id}'.")
        return 0

    print(f"\n  {'Calculated At':<34s} {'Knowledge':>9s} {'Tools':>6s} {'Total':>6s}")
    print(f"  {'─'*34} {'─'*9} {'─'*6} {'─'*6}")
    for r in rows:
        print(f"  {r['calculatedAt']:<34s} {r['knowledgeScore']:>9d} "
              f"{r['toolScore']:>6d} {r['totalScore']:>6d}")
    print()
    return 0


def generate_reports(
    scored: list[ScoredApplication],
    config: EngineConfig,
    run_id: str,
) -> list[Path]:
    """Generate all requested report formats."""
    created = []
    formats = config.output.formats

    if "json" in formats:
        path = export_json(scored, config.output.json_dir, run_id)
        created.append(path)
        print(f"  📄 JSON:       {path}")

    if "csv" in formats:
        paths = export_csv(scored, config.output.csv_dir, run_id)
        created.extend(paths)
        for p in paths:
            print(f"  📊 CSV:        {p}")

    if "markdown" in formats:
        path = export_markdown(scored, config.output.reports_dir, run_id)
        created.append(path)
        print(f"  📝 Markdown:   {path}")

    return created


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _add_location_args(parser: argparse.ArgumentParser, default) -> None:
    parser.add_argument(
        "--scoring-dir",
        type=Path,
        default=default,
        help="Directory holding integrationLevels.json, toolQuality.json and riskFactors.json",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=default,
        help="Path to the score history SQLite database",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="appsec_scoring",
        description=f"Application Security Scoring Engine v{__version__}",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to JSON configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    _add_location_args(parser, default=None)

    # Accepted after the sub-command too; SUPPRESS keeps a value given
    # before the sub-command from being reset.
    common = argparse.ArgumentParser(add_help=False)
    _add_location_args(common, default=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # score
    score_p = subparsers.add_parser(
        "score", parents=[common], help="Score applications from a JSON or CSV file",
    )
    score_p.add_argument("input", type=Path, help="Application export (.json or .csv)")
    score_p.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Output directory for reports (default: ./appsec_scores_<timestamp>)",
    )
    score_p.add_argument(
        "--formats",
        nargs="+",
        choices=["json", "csv", "markdown"],
        default=None,
        help="Output formats to generate",
    )
    score_p.add_argument(
        "--no-history",
        action="store_true",
        help="Do not append computed scores to the history database",
    )

    # levels
    subparsers.add_parser("levels", parents=[common], help="List configured integration levels")

    # history
    hist_p = subparsers.add_parser(
        "history", parents=[common], help="Show the stored score trail for an application",
    )
    hist_p.add_argument("application_id", help="Application id")
    hist_p.add_argument("--limit", type=int, default=10, help="Number of entries (default: 10)")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Build engine configuration from a config file plus CLI overrides."""
    if args.config and args.config.exists():
        config = EngineConfig.from_file(args.config)
    else:
        config = EngineConfig()

    if args.verbose:
        config.verbose = True
    if args.scoring_dir:
        config.scoring_dir = str(args.scoring_dir)
    if args.history:
        config.history.db_path = str(args.history)
    if getattr(args, "no_history", False):
        config.history.enabled = False
    if getattr(args, "output_dir", None):
        config.output.base_dir = str(args.output_dir)
    if getattr(args, "formats", None):
        config.output.formats = list(args.formats)
    return config


_COMMANDS = {
    "score": _cmd_score,
    "levels": _cmd_levels,
    "history": _cmd_history,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = build_config(args)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    handler = _COMMANDS.get(args.command)
    if handler is None:
        print("Usage: python -m appsec_scoring {score|levels|history} ...")
        return 0

    try:
        return handler(args, config)
    except ScoringError as e:
        print(f"\n❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
