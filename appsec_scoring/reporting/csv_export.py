"""
CSV exporter — Produces per-application and per-category score tables.
"""

from __future__ import annotations

import csv
from pathlib import Path

from ..scoring.models import ScoredApplication


SCORE_FIELDS = [
    "application_id", "name", "company", "facing", "data_types",
    "knowledge_score", "tool_score", "total_score", "rating",
    "fields_filled", "completeness_score", "review_score", "last_reviewed",
]

CATEGORY_FIELDS = [
    "application_id", "category", "tool", "integration_level", "not_applicable",
    "risk_weight", "max_points", "achieved_points",
    "integration_weight", "tool_weight",
]


def export_csv(
    scored: list[ScoredApplication],
    output_dir: Path,
    run_id: str,
) -> list[Path]:
    """
    Write CSV files for application scores and tool categories.

    Returns:
        List of created CSV file paths.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    created = []

    # --- Application Scores CSV ---
    scores_path = output_dir / f"scores_{run_id}.csv"
    with open(scores_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=SCORE_FIELDS)
        writer.writeheader()
        for s in scored:
            app = s.application
            ks = s.breakdown.knowledge_sharing
            writer.writerow({
                "application_id": app.id or "",
                "name": app.name or "",
                "company": app.company or "",
                "facing": app.facing or "",
                "data_types": app.data_types or "",
                "knowledge_score": s.result.knowledge_score,
                "tool_score": s.result.tool_score,
                "total_score": s.result.total_score,
                "rating": s.rating,
                "fields_filled": ks.fields_filled,
                "completeness_score": ks.completeness_score,
                "review_score": ks.review_score,
                "last_reviewed": ks.last_reviewed or "",
            })
    created.append(scores_path)

    # --- Tool Categories CSV ---
    categories_path = output_dir / f"categories_{run_id}.csv"
    with open(categories_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=CATEGORY_FIELDS)
        writer.writeheader()
        for s in scored:
            for c in s.breakdown.tool_usage:
                writer.writerow({
                    "application_id": s.application.id or "",
                    "category": c.category,
                    "tool": c.tool or "",
                    "integration_level": "" if c.integration_level is None else c.integration_level,
                    "not_applicable": c.not_applicable,
                    "risk_weight": c.risk_weight,
                    "max_points": round(c.max_points, 2),
                    "achieved_points": round(c.achieved_points, 2),
                    "integration_weight": c.integration_weight,
                    "tool_weight": c.tool_weight,
                })
    created.append(categories_path)

    return created
