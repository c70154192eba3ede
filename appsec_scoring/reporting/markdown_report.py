"""
Markdown score report — Per-application breakdown rendered via Jinja2.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..scoring.models import ScoredApplication


TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "score_report.md.j2"

_RATING_ICONS = {
    "Excellent":         "🟢",
    "Good":              "🟡",
    "Needs Improvement": "🔴",
}


def export_markdown(
    scored: list[ScoredApplication],
    output_dir: Path,
    run_id: str,
) -> Path:
    """Generate a Markdown report covering every scored application."""
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / f"score_report_{run_id}.md"

    with open(filepath, "w", encoding="utf-8") as fh:
        fh.write(render_markdown(scored, run_id))

    return filepath


def render_markdown(scored: list[ScoredApplication], run_id: str) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template(TEMPLATE_NAME)
    ranked = sorted(scored, key=lambda s: s.result.total_score)
    return template.render(
        run_id=run_id,
        generated_utc=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
        applications=ranked,
        rating_icons=_RATING_ICONS,
    )
