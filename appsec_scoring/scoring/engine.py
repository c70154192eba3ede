"""
Scoring Engine — Computes the 0-100 application security score.

Scoring model:
  - Knowledge sharing (0-50): 40 points for metadata completeness across
    eight fields, plus 10 points when the metadata was reviewed within the
    last six calendar months.
  - Tool usage (0-50): four security-tool categories, each with a ceiling of
    12.5 points scaled by the application's risk weight. Achieved points are
    ceiling × integration weight × tool quality weight. The sum of achieved
    points is normalized against the sum of ceilings back onto 0-50.
  - Total = knowledge sharing + tool usage.

Rounding is half-up and happens only on the knowledge sum and on the
normalized tool score.
"""

from __future__ import annotations

import calendar
import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import (
    CATEGORY_DISPLAY,
    COMPLETENESS_SHARE,
    FRESHNESS_SHARE,
    KNOWLEDGE_FIELDS,
    MAX_SCORE_PER_CATEGORY,
    NA_CATEGORY,
    RATING_THRESHOLDS,
    REVIEW_WINDOW_MONTHS,
    TOOL_CATEGORIES,
)
from .models import (
    ApplicationRecord,
    CategoryScore,
    KnowledgeBreakdown,
    ScoreBreakdown,
    ScoredApplication,
    ScoreResult,
)
from .tables import ScoringTables, default_tables

logger = logging.getLogger("appsec_scoring.engine")

COMPLETENESS_POINTS = MAX_SCORE_PER_CATEGORY * COMPLETENESS_SHARE    # 40
FRESHNESS_POINTS = MAX_SCORE_PER_CATEGORY * FRESHNESS_SHARE          # 10
BASE_POINTS_PER_CATEGORY = MAX_SCORE_PER_CATEGORY / len(TOOL_CATEGORIES)  # 12.5


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (2.5 → 3, 12.5 → 13)."""
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Knowledge sharing
# ---------------------------------------------------------------------------

def is_filled(value: Any) -> bool:
    """A knowledge field counts when it is a non-empty string (or any non-null non-string)."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


def filled_knowledge_fields(app: ApplicationRecord) -> list[str]:
    return [name for name in KNOWLEDGE_FIELDS if is_filled(app.value(name))]


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable metadataLastReviewed {value!r}, treating as not reviewed")
            return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def subtract_months(moment: datetime, months: int) -> datetime:
    """Same wall-clock time `months` calendar months earlier, clamped to the month's last day."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def is_recently_reviewed(app: ApplicationRecord, now: Optional[datetime] = None) -> bool:
    reviewed = _parse_timestamp(app.metadata_last_reviewed)
    if reviewed is None:
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return reviewed > subtract_months(now, REVIEW_WINDOW_MONTHS)


def knowledge_sharing_score(app: ApplicationRecord, now: Optional[datetime] = None) -> int:
    """
    Knowledge Sharing Score (0-50).
      - completeness: filled / 8 × 40
      - freshness:    10 if reviewed within the last 6 months, else 0
    """
    filled = len(filled_knowledge_fields(app))
    score = (filled / len(KNOWLEDGE_FIELDS)) * COMPLETENESS_POINTS
    if is_recently_reviewed(app, now):
        score += FRESHNESS_POINTS
    return round_half_up(score)


# ---------------------------------------------------------------------------
# Tool usage
# ---------------------------------------------------------------------------

def score_tool_categories(
    app: ApplicationRecord,
    tables: Optional[ScoringTables] = None,
) -> list[CategoryScore]:
    """Per-category ceilings and achieved points, in fixed category order."""
    tables = tables or default_tables()
    categories = []

    for category in TOOL_CATEGORIES:
        risk_weight = tables.risk_weight(app.facing, app.data_types)
        cs = CategoryScore(
            category=category,
            display_name=CATEGORY_DISPLAY.get(category, category),
            risk_weight=risk_weight,
            max_points=BASE_POINTS_PER_CATEGORY * risk_weight,
            tool=app.tool(category),
            integration_level=app.integration_level(category),
        )
        categories.append(cs)

        if category == NA_CATEGORY and app.api_security_na is True:
            cs.not_applicable = True
            cs.achieved_points = cs.max_points
            continue

        if not cs.tool or cs.integration_level is None:
            continue

        cs.integration_weight = tables.integration_weight(cs.integration_level)
        cs.tool_weight = tables.tool_weight(cs.tool)
        cs.achieved_points = cs.max_points * cs.integration_weight * cs.tool_weight

    return categories


def normalize_tool_points(categories: list[CategoryScore]) -> int:
    total_possible = sum(c.max_points for c in categories)
    if total_possible == 0:
        return 0
    total_achieved = sum(c.achieved_points for c in categories)
    return round_half_up((total_achieved / total_possible) * MAX_SCORE_PER_CATEGORY)


def tool_usage_score(app: ApplicationRecord, tables: Optional[ScoringTables] = None) -> int:
    """Tool Usage Score (0-50), risk-adjusted and normalized across the four categories."""
    return normalize_tool_points(score_tool_categories(app, tables))


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def compute_score(
    app: ApplicationRecord,
    tables: Optional[ScoringTables] = None,
    now: Optional[datetime] = None,
) -> ScoreResult:
    """
    Compute the full application score.

    Args:
        app:    Application snapshot to score.
        tables: Configuration tables (packaged defaults if omitted).
        now:    Reference time for the freshness check (current UTC time if omitted).

    Returns:
        ScoreResult with knowledge, tool and total scores.
    """
    knowledge = knowledge_sharing_score(app, now)
    tool = tool_usage_score(app, tables)
    return ScoreResult(
        knowledge_score=knowledge,
        tool_score=tool,
        total_score=knowledge + tool,
    )


def score_rating(total_score: int) -> str:
    for threshold, rating in RATING_THRESHOLDS:
        if total_score >= threshold:
            return rating
    return RATING_THRESHOLDS[-1][1]


def score_breakdown(
    app: ApplicationRecord,
    result: ScoreResult,
    tables: Optional[ScoringTables] = None,
) -> ScoreBreakdown:
    """Completeness/freshness split and per-category detail behind a computed result."""
    filled = filled_knowledge_fields(app)
    completeness = round_half_up((len(filled) / len(KNOWLEDGE_FIELDS)) * COMPLETENESS_POINTS)
    categories = score_tool_categories(app, tables)

    return ScoreBreakdown(
        knowledge_sharing=KnowledgeBreakdown(
            fields_filled=len(filled),
            total_fields=len(KNOWLEDGE_FIELDS),
            completeness_score=completeness,
            # Remainder so the two parts always add up to the displayed score
            review_score=result.knowledge_score - completeness,
            last_reviewed=app.metadata_last_reviewed,
            missing_fields=[f for f in KNOWLEDGE_FIELDS if f not in filled],
        ),
        tool_usage=categories,
        total_possible_points=sum(c.max_points for c in categories),
        total_achieved_points=sum(c.achieved_points for c in categories),
    )


def score_application(
    app: ApplicationRecord,
    tables: Optional[ScoringTables] = None,
    now: Optional[datetime] = None,
) -> ScoredApplication:
    """Score one application and attach breakdown and rating."""
    result = compute_score(app, tables, now)
    return ScoredApplication(
        application=app,
        result=result,
        breakdown=score_breakdown(app, result, tables),
        rating=score_rating(result.total_score),
    )
