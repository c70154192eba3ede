"""Tests for score aggregation, breakdown and rating."""
from datetime import timedelta

import pytest

from appsec_scoring.scoring import (
    ScoreResult,
    compute_score,
    score_application,
    score_breakdown,
    score_rating,
)

from conftest import NOW, full_metadata, full_tooling, make_app


def test_perfect_application_scores_one_hundred(tables):
    app = make_app(**full_metadata(), **full_tooling(), metadataLastReviewed=NOW - timedelta(days=1))
    assert compute_score(app, tables, NOW) == ScoreResult(50, 50, 100)


def test_empty_application_scores_zero(tables):
    assert compute_score(make_app(), tables, NOW) == ScoreResult(0, 0, 0)


@pytest.mark.parametrize("overrides", [
    {},
    {"description": "x", "apiSecurityNA": True},
    {"facing": "External", "dataTypes": "PII,PCI", "sastTool": "Semgrep", "sastIntegrationLevel": 1},
    dict(full_metadata(), **full_tooling(level=3, tool="Homegrown")),
])
def test_total_is_sum_and_bounded(tables, overrides):
    result = compute_score(make_app(**overrides), tables, NOW)
    assert result.total_score == result.knowledge_score + result.tool_score
    assert 0 <= result.knowledge_score <= 50
    assert 0 <= result.tool_score <= 50
    assert 0 <= result.total_score <= 100


def test_compute_score_is_deterministic(tables):
    app = make_app(**full_metadata(), sastTool="SonarQube", sastIntegrationLevel=3)
    assert compute_score(app, tables, NOW) == compute_score(app, tables, NOW)


def test_default_tables_are_used_when_none_given():
    app = make_app(**full_tooling(tool="SonarQube", level=4))
    assert compute_score(app, now=NOW).tool_score == 50


def test_to_dict_uses_camel_case_keys():
    assert ScoreResult(20, 13, 33).to_dict() == {"knowledgeScore": 20, "toolScore": 13, "totalScore": 33}


# ── Breakdown ───────────────────────────────────────────────────────


def test_breakdown_splits_completeness_and_review(tables):
    app = make_app(description="d", owner="o", repoUrl="r", metadataLastReviewed=NOW - timedelta(days=5))
    result = compute_score(app, tables, NOW)
    ks = score_breakdown(app, result, tables).knowledge_sharing

    assert ks.fields_filled == 3
    assert ks.total_fields == 8
    assert ks.completeness_score == 15
    assert ks.review_score == 10
    assert ks.completeness_score + ks.review_score == result.knowledge_score
    assert "language" in ks.missing_fields
    assert "owner" not in ks.missing_fields


def test_breakdown_carries_tool_totals(tables):
    app = make_app(sastTool="SonarQube", sastIntegrationLevel=4)
    result = compute_score(app, tables, NOW)
    breakdown = score_breakdown(app, result, tables)

    assert breakdown.total_possible_points == 50
    assert breakdown.total_achieved_points == 12.5
    assert [c.implemented for c in breakdown.tool_usage] == [True, False, False, False]
    assert breakdown.to_dict()["toolUsage"]["categories"][0]["tool"] == "SonarQube"


# ── Rating ──────────────────────────────────────────────────────────


@pytest.mark.parametrize("total,rating", [
    (100, "Excellent"), (76, "Excellent"), (75, "Good"), (51, "Good"),
    (50, "Needs Improvement"), (0, "Needs Improvement"),
])
def test_score_rating(total, rating):
    assert score_rating(total) == rating


def test_score_application_bundles_everything(tables):
    app = make_app(id="app-1", name="Portal", **full_metadata(), **full_tooling())
    scored = score_application(app, tables, NOW)

    assert scored.result.total_score == 90
    assert scored.rating == "Excellent"
    payload = scored.to_dict()
    assert payload["totalScore"] == 90
    assert payload["application"]["name"] == "Portal"
    assert payload["breakdown"]["knowledgeSharing"]["fieldsFilled"] == 8
