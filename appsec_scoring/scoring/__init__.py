"""Scoring package — knowledge-sharing and tool-usage scoring for applications."""

from .engine import (
    compute_score,
    knowledge_sharing_score,
    score_application,
    score_breakdown,
    score_rating,
    tool_usage_score,
)
from .models import (
    ApplicationRecord,
    CategoryScore,
    KnowledgeBreakdown,
    ScoreBreakdown,
    ScoredApplication,
    ScoreResult,
)
from .tables import (
    ScoringConfigError,
    ScoringError,
    ScoringTables,
    default_tables,
    integration_level_options,
    reload_default_tables,
)

__all__ = [
    "compute_score",
    "knowledge_sharing_score",
    "tool_usage_score",
    "score_application",
    "score_breakdown",
    "score_rating",
    "ApplicationRecord",
    "CategoryScore",
    "KnowledgeBreakdown",
    "ScoreBreakdown",
    "ScoredApplication",
    "ScoreResult",
    "ScoringConfigError",
    "ScoringError",
    "ScoringTables",
    "default_tables",
    "integration_level_options",
    "reload_default_tables",
]
