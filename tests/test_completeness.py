"""Tests for application profile completeness."""
from appsec_scoring.completeness import PROFILE_FIELDS, application_completeness

from conftest import full_metadata, full_tooling, make_app


def test_empty_profile():
    assert application_completeness(make_app()) == {"filled": 0, "total": 21, "percentage": 0}


def test_full_profile():
    app = make_app(
        name="Portal",
        facing="External",
        deploymentType="Cloud",
        interfaces='[{"type": "REST"}]',
        **full_metadata(),
        **full_tooling(),
    )
    assert application_completeness(app) == {"filled": 21, "total": 21, "percentage": 100}


def test_zero_level_and_false_flag_count_as_filled():
    app = make_app(name="Portal", sastIntegrationLevel=0, apiSecurityNA=False)
    result = application_completeness(app)
    assert result["filled"] == 3
    assert result["percentage"] == 14


def test_interfaces_need_a_non_empty_json_array():
    assert application_completeness(make_app(interfaces="[]"))["filled"] == 0
    assert application_completeness(make_app(interfaces="REST, gRPC"))["filled"] == 0
    assert application_completeness(make_app(interfaces='{"type": "REST"}'))["filled"] == 0
    assert application_completeness(make_app(interfaces='["REST"]'))["filled"] == 1


def test_profile_field_list_covers_all_tool_fields():
    for category in ("sast", "dast", "appFirewall", "apiSecurity"):
        assert f"{category}Tool" in PROFILE_FIELDS
        assert f"{category}IntegrationLevel" in PROFILE_FIELDS
