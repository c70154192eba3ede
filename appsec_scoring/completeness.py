"""
Application profile completeness — How much of an application's catalog entry is filled in.

Unlike the knowledge-sharing score, this covers the whole profile (tooling
and exposure fields included) and each field type has its own predicate:
  - strings:            non-empty
  - integration levels: not None (0 is a valid level)
  - apiSecurityNA:      explicitly set, true or false
  - interfaces:         a JSON array with at least one entry
"""

from __future__ import annotations

import json
import logging

from .scoring.engine import round_half_up
from .scoring.models import ApplicationRecord

logger = logging.getLogger("appsec_scoring.completeness")

PROFILE_FIELDS = (
    # Basic info
    "name",
    "description",
    "owner",
    "repoUrl",
    # Application details
    "language",
    "framework",
    "serverEnvironment",
    "facing",
    "deploymentType",
    "authProfiles",
    "dataTypes",
    # Security tools
    "sastTool",
    "sastIntegrationLevel",
    "dastTool",
    "dastIntegrationLevel",
    "appFirewallTool",
    "appFirewallIntegrationLevel",
    "apiSecurityTool",
    "apiSecurityIntegrationLevel",
    "apiSecurityNA",
    # Counted once if any interface is declared
    "interfaces",
)


def _interfaces_filled(value) -> bool:
    if not value:
        return False
    if isinstance(value, list):
        return len(value) > 0
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        logger.debug(f"interfaces is not valid JSON: {value!r}")
        return False
    return isinstance(parsed, list) and len(parsed) > 0


def _field_filled(name: str, value) -> bool:
    if name == "interfaces":
        return _interfaces_filled(value)
    if name == "apiSecurityNA" or name.endswith("IntegrationLevel"):
        return value is not None
    return value is not None and value != ""


def application_completeness(app: ApplicationRecord) -> dict:
    """Returns {"filled", "total", "percentage"} for the application profile."""
    filled = sum(1 for name in PROFILE_FIELDS if _field_filled(name, app.value(name)))
    total = len(PROFILE_FIELDS)
    return {
        "filled": filled,
        "total": total,
        "percentage": round_half_up((filled / total) * 100),
    }
