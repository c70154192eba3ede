"""
JSON exporter — Produces the full JSON output of a scoring run.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from .. import __version__
from ..scoring.models import ScoredApplication


def export_json(
    scored: list[ScoredApplication],
    output_dir: Path,
    run_id: str,
) -> Path:
    """
    Write every scored application to a JSON file.

    Returns:
        Path to the created JSON file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    totals = [s.result.total_score for s in scored]
    payload = {
        "metadata": {
            "engine": "Application Security Scoring Engine",
            "version": __version__,
            "run_id": run_id,
            "generated_utc": datetime.now(timezone.utc).isoformat(),
            "application_count": len(scored),
            "average_total_score": round(sum(totals) / len(totals), 1) if totals else None,
        },
        "applications": [s.to_dict() for s in scored],
    }

    filepath = output_dir / f"appsec_scores_{run_id}.json"

    with open(filepath, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str, ensure_ascii=False)

    return filepath
