"""Shared fixtures: small scoring tables with known weights and a fixed clock."""
from datetime import datetime, timezone

import pytest

from appsec_scoring.scoring import ApplicationRecord, ScoringTables


INTEGRATION_LEVELS = {
    "//": "test levels",
    "0": {"name": "0 - None", "weight": 0.0},
    "1": {"name": "1 - Manual", "weight": 0.4},
    "3": {"name": "3 - Automated", "weight": 0.8},
    "4": {"name": "4 - Blocking", "weight": 1.0},
}

TOOL_QUALITY = {
    "managed": {"SonarQube": 1.0, "Cloudflare WAF": 1.0},
    "approvedUnmanaged": {"Semgrep": 0.9},
    "other": 0.8,
}

RISK_FACTORS = {
    "facing": {"External": 1.5, "Internal": 1.0, "Sandbox": 0.5},
    "dataTypes": {"PII": 1.2, "PCI": 1.5},
}

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def tables() -> ScoringTables:
    return ScoringTables.from_dicts(INTEGRATION_LEVELS, TOOL_QUALITY, RISK_FACTORS)


@pytest.fixture
def now() -> datetime:
    return NOW


def make_app(**overrides) -> ApplicationRecord:
    """ApplicationRecord from camelCase keys, everything else None."""
    return ApplicationRecord.from_dict(overrides)


def full_metadata(**overrides) -> dict:
    data = {
        "description": "Customer portal",
        "owner": "Payments Team",
        "repoUrl": "https://git.example.com/portal",
        "language": "Python",
        "framework": "Django",
        "serverEnvironment": "Kubernetes",
        "authProfiles": "SSO",
        "dataTypes": "PII",
    }
    data.update(overrides)
    return data


def full_tooling(level: int = 4, tool: str = "SonarQube", **overrides) -> dict:
    data = {}
    for category in ("sast", "dast", "appFirewall", "apiSecurity"):
        data[f"{category}Tool"] = tool
        data[f"{category}IntegrationLevel"] = level
    data["apiSecurityNA"] = False
    data.update(overrides)
    return data
