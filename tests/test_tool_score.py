"""Tests for the risk-weighted tool-usage half of the score."""
import pytest

from appsec_scoring.scoring import ScoringTables, tool_usage_score
from appsec_scoring.scoring.engine import round_half_up, score_tool_categories

from conftest import INTEGRATION_LEVELS, RISK_FACTORS, TOOL_QUALITY, full_tooling, make_app


# ── Bounds ──────────────────────────────────────────────────────────


def test_no_tooling_is_zero(tables):
    assert tool_usage_score(make_app(), tables) == 0


def test_full_tooling_at_max_weights_is_fifty(tables):
    assert tool_usage_score(make_app(**full_tooling()), tables) == 50


def test_api_security_na_with_other_three_maxed_is_fifty(tables):
    app = make_app(**full_tooling(apiSecurityTool=None, apiSecurityIntegrationLevel=None, apiSecurityNA=True))
    assert tool_usage_score(app, tables) == 50


def test_na_alone_scores_its_share_rounded_half_up(tables):
    # 12.5 / 50 * 50 = 12.5 rounds up to 13
    assert tool_usage_score(make_app(apiSecurityNA=True), tables) == 13


def test_na_overrides_a_configured_api_tool(tables):
    app = make_app(apiSecurityNA=True, apiSecurityTool="Unknown Gateway", apiSecurityIntegrationLevel=1)
    categories = score_tool_categories(app, tables)
    api = categories[-1]
    assert api.not_applicable
    assert api.achieved_points == api.max_points


@pytest.mark.parametrize("category", ["sast", "dast", "appFirewall"])
def test_only_api_security_can_be_not_applicable(tables, category):
    categories = score_tool_categories(make_app(apiSecurityNA=True), tables)
    by_name = {c.category: c for c in categories}
    assert not by_name[category].not_applicable
    assert by_name[category].achieved_points == 0


# ── Per-category computation ────────────────────────────────────────


def test_categories_in_fixed_order(tables):
    names = [c.category for c in score_tool_categories(make_app(), tables)]
    assert names == ["sast", "dast", "appFirewall", "apiSecurity"]


def test_missing_level_means_no_points(tables):
    app = make_app(sastTool="SonarQube", sastIntegrationLevel=None)
    assert tool_usage_score(app, tables) == 0


def test_missing_tool_means_no_points(tables):
    app = make_app(sastTool="", sastIntegrationLevel=4)
    assert tool_usage_score(app, tables) == 0


def test_unknown_tool_uses_other_weight(tables):
    # 12.5 * 1.0 * 0.8 = 10 of 50 possible
    app = make_app(sastTool="Homegrown Scanner", sastIntegrationLevel=4)
    assert tool_usage_score(app, tables) == 10
    assert score_tool_categories(app, tables)[0].tool_weight == 0.8


def test_approved_unmanaged_tool_weight(tables):
    # 12.5 * 1.0 * 0.9 = 11.25 of 50 possible
    app = make_app(sastTool="Semgrep", sastIntegrationLevel=4)
    assert tool_usage_score(app, tables) == 11


def test_unknown_integration_level_weighs_zero(tables):
    app = make_app(sastTool="SonarQube", sastIntegrationLevel=9)
    assert tool_usage_score(app, tables) == 0
    assert score_tool_categories(app, tables)[0].integration_weight == 0.0


def test_level_zero_is_a_real_level():
    levels = dict(INTEGRATION_LEVELS, **{"0": {"name": "0", "weight": 0.5}})
    tables = ScoringTables.from_dicts(levels, TOOL_QUALITY, RISK_FACTORS)
    # 12.5 * 0.5 * 1.0 = 6.25 of 50 possible
    app = make_app(sastTool="SonarQube", sastIntegrationLevel=0)
    assert tool_usage_score(app, tables) == 6


@pytest.mark.parametrize("level", [3, "3", 3.0])
def test_level_lookup_coerces_to_string_key(tables, level):
    app = make_app(sastTool="SonarQube", sastIntegrationLevel=level)
    assert score_tool_categories(app, tables)[0].integration_weight == 0.8


# ── Risk weighting ──────────────────────────────────────────────────


def test_external_pii_scenario(tables):
    # Risk weight 1.5 applies to every category: ceilings 4 × 18.75 = 75.
    # sast achieves 18.75 * 0.8 * 1.0 = 15 → 15 / 75 * 50 = 10
    app = make_app(
        facing="External",
        dataTypes="PII",
        sastTool="SonarQube",
        sastIntegrationLevel=3,
        apiSecurityNA=False,
    )
    categories = score_tool_categories(app, tables)
    assert [c.max_points for c in categories] == [18.75] * 4
    assert categories[0].achieved_points == pytest.approx(15.0)
    assert tool_usage_score(app, tables) == 10


def test_risk_weight_is_max_not_product(tables):
    assert tables.risk_weight("External", "PII") == 1.5
    assert tables.risk_weight("Internal", "PII") == 1.2


def test_risk_weight_never_below_baseline(tables):
    assert tables.risk_weight("Sandbox", None) == 1.0


def test_unknown_risk_keys_are_ignored(tables):
    assert tables.risk_weight("Martian", "Recipes") == 1.0


def test_malformed_data_types_are_tolerated(tables):
    assert tables.risk_weight(None, " PII , ,PCI,") == 1.5


def test_risk_does_not_change_score_without_tooling(tables):
    assert tool_usage_score(make_app(facing="External", dataTypes="PCI"), tables) == 0


def test_risk_weight_cancels_out_under_normalization(tables):
    tooling = dict(sastTool="SonarQube", sastIntegrationLevel=3, dastTool="Semgrep", dastIntegrationLevel=3)
    low = tool_usage_score(make_app(facing="Internal", **tooling), tables)
    high = tool_usage_score(make_app(facing="External", dataTypes="PCI", **tooling), tables)
    assert low == high


# ── Rounding ────────────────────────────────────────────────────────


@pytest.mark.parametrize("value,expected", [(12.5, 13), (2.5, 3), (13.33, 13), (0.49, 0), (49.5, 50)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
