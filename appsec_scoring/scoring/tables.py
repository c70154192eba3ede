"""
Configuration tables — Integration levels, tool quality and risk factors.

The three tables are loaded from JSON once per process and exposed as
immutable mappings. Lookups go through explicit functions so every fallback
is defined in one place:

  - unknown integration level  → weight 0.0
  - unknown tool name          → the "other" quality weight
  - unknown facing / data type → no effect on the risk weight (baseline 1.0)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..config import (
    BASELINE_RISK_WEIGHT,
    COMMENT_KEY,
    DEFAULT_OTHER_TOOL_WEIGHT,
    DEFAULT_SCORING_DIR,
    INTEGRATION_LEVELS_FILE,
    RISK_FACTORS_FILE,
    TOOL_QUALITY_FILE,
)

logger = logging.getLogger("appsec_scoring.tables")


class ScoringError(Exception):
    """Base class for scoring engine errors."""


class ScoringConfigError(ScoringError):
    """A configuration table is missing or malformed."""


@dataclass(frozen=True)
class IntegrationLevel:
    key: str
    name: str
    weight: float


@dataclass(frozen=True)
class ToolQuality:
    managed: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    approved_unmanaged: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    other: float = DEFAULT_OTHER_TOOL_WEIGHT


@dataclass(frozen=True)
class RiskFactors:
    facing: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    data_types: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class ScoringTables:
    """The immutable configuration a scoring run reads from."""
    integration_levels: Mapping[str, IntegrationLevel]
    tool_quality: ToolQuality
    risk_factors: RiskFactors

    # --- Construction ---

    @classmethod
    def from_dicts(
        cls,
        integration_levels: Any,
        tool_quality: Any,
        risk_factors: Any,
    ) -> "ScoringTables":
        """Build tables from the JSON-shaped dicts. Raises ScoringConfigError on bad shape."""
        return cls(
            integration_levels=_parse_integration_levels(integration_levels),
            tool_quality=_parse_tool_quality(tool_quality),
            risk_factors=_parse_risk_factors(risk_factors),
        )

    @classmethod
    def load(cls, scoring_dir: str | Path | None = None) -> "ScoringTables":
        """Load the three JSON tables from a directory (packaged defaults if omitted)."""
        directory = Path(scoring_dir) if scoring_dir else DEFAULT_SCORING_DIR
        tables = cls.from_dicts(
            _read_json(directory / INTEGRATION_LEVELS_FILE),
            _read_json(directory / TOOL_QUALITY_FILE),
            _read_json(directory / RISK_FACTORS_FILE),
        )
        logger.info(
            f"Loaded scoring tables from {directory}: "
            f"{len(tables.integration_levels)} integration levels, "
            f"{len(tables.tool_quality.managed)} managed tools, "
            f"{len(tables.tool_quality.approved_unmanaged)} approved-unmanaged tools"
        )
        return tables

    # --- Lookups ---

    def integration_weight(self, level: Any) -> float:
        """Weight for an integration level; 0.0 when the level is unknown."""
        entry = self.integration_levels.get(level_key(level))
        if entry is None:
            logger.debug(f"Unknown integration level {level!r}, weight 0")
            return 0.0
        return entry.weight

    def tool_weight(self, tool: str) -> float:
        """Quality weight: managed list first, then approved-unmanaged, then 'other'."""
        if tool in self.tool_quality.managed:
            return self.tool_quality.managed[tool]
        if tool in self.tool_quality.approved_unmanaged:
            return self.tool_quality.approved_unmanaged[tool]
        logger.debug(f"Tool {tool!r} not in quality lists, using other={self.tool_quality.other}")
        return self.tool_quality.other

    def risk_weight(self, facing: Optional[str], data_types: Optional[str]) -> float:
        """
        Highest applicable multiplier across facing and every data-type tag,
        never below the 1.0 baseline.
        """
        weight = BASELINE_RISK_WEIGHT
        if facing and facing in self.risk_factors.facing:
            weight = max(weight, self.risk_factors.facing[facing])
        for tag in split_data_types(data_types):
            if tag in self.risk_factors.data_types:
                weight = max(weight, self.risk_factors.data_types[tag])
        return weight


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def level_key(level: Any) -> str:
    """Integration level as the string key used by integrationLevels.json (3, 3.0 and "3" → "3")."""
    if isinstance(level, float) and level.is_integer():
        level = int(level)
    return str(level).strip()


def split_data_types(data_types: Optional[str]) -> list[str]:
    """Comma-split and trim; empty entries (e.g. from a trailing comma) are dropped."""
    if not data_types:
        return []
    return [tag.strip() for tag in str(data_types).split(",") if tag.strip()]


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise ScoringConfigError(f"Scoring table not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ScoringConfigError(f"Invalid JSON in {path}: {e}") from e


def _as_weight(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScoringConfigError(f"{where}: expected a number, got {value!r}")
    return float(value)


def _require_mapping(value: Any, where: str) -> dict:
    if not isinstance(value, dict):
        raise ScoringConfigError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _weight_map(data: Any, where: str) -> Mapping[str, float]:
    data = _require_mapping(data, where)
    return MappingProxyType({
        name: _as_weight(w, f"{where}.{name}")
        for name, w in data.items()
        if name != COMMENT_KEY
    })


def _parse_integration_levels(data: Any) -> Mapping[str, IntegrationLevel]:
    data = _require_mapping(data, "integrationLevels")
    levels = {}
    for key, entry in data.items():
        if key == COMMENT_KEY:
            continue
        entry = _require_mapping(entry, f"integrationLevels.{key}")
        if "weight" not in entry:
            raise ScoringConfigError(f"integrationLevels.{key}: missing 'weight'")
        weight = _as_weight(entry["weight"], f"integrationLevels.{key}.weight")
        if not 0.0 <= weight <= 1.0:
            raise ScoringConfigError(f"integrationLevels.{key}.weight: {weight} is outside [0, 1]")
        levels[str(key)] = IntegrationLevel(key=str(key), name=str(entry.get("name", key)), weight=weight)
    return MappingProxyType(levels)


def _parse_tool_quality(data: Any) -> ToolQuality:
    data = _require_mapping(data, "toolQuality")
    for section in ("managed", "approvedUnmanaged"):
        if section not in data:
            raise ScoringConfigError(f"toolQuality: missing '{section}' section")
    other = data.get("other")
    return ToolQuality(
        managed=_weight_map(data["managed"], "toolQuality.managed"),
        approved_unmanaged=_weight_map(data["approvedUnmanaged"], "toolQuality.approvedUnmanaged"),
        other=_as_weight(other, "toolQuality.other") if other else DEFAULT_OTHER_TOOL_WEIGHT,
    )


def _parse_risk_factors(data: Any) -> RiskFactors:
    data = _require_mapping(data, "riskFactors")
    for section in ("facing", "dataTypes"):
        if section not in data:
            raise ScoringConfigError(f"riskFactors: missing '{section}' section")
    return RiskFactors(
        facing=_weight_map(data["facing"], "riskFactors.facing"),
        data_types=_weight_map(data["dataTypes"], "riskFactors.dataTypes"),
    )


# ---------------------------------------------------------------------------
# Process-wide default tables
# ---------------------------------------------------------------------------

@lru_cache(maxsize=1)
def default_tables() -> ScoringTables:
    """The packaged tables, loaded on first use and shared for the process lifetime."""
    return ScoringTables.load(DEFAULT_SCORING_DIR)


def reload_default_tables() -> ScoringTables:
    """Drop the cached defaults and load them again."""
    default_tables.cache_clear()
    return default_tables()


def integration_level_options(tables: Optional[ScoringTables] = None) -> list[dict]:
    """Integration levels as value/label pairs for selection lists, in table order."""
    tables = tables or default_tables()
    return [
        {"value": level.key, "label": level.name}
        for level in tables.integration_levels.values()
    ]
