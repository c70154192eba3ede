"""
Configuration module for the Application Security Scoring Engine.
Defines scoring constants, packaged table locations, and operational settings.
"""

from __future__ import annotations

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone


# ─── Scoring Constants ──────────────────────────────────────────────────────

MAX_SCORE_PER_CATEGORY = 50       # Knowledge sharing and tool usage are each out of 50
COMPLETENESS_SHARE = 0.8          # 40 of the 50 knowledge points
FRESHNESS_SHARE = 0.2             # 10 of the 50 knowledge points
REVIEW_WINDOW_MONTHS = 6          # Review older than this earns no freshness points
DEFAULT_OTHER_TOOL_WEIGHT = 0.8   # Used when toolQuality.json has no "other" entry
BASELINE_RISK_WEIGHT = 1.0

TOOL_CATEGORIES = ("sast", "dast", "appFirewall", "apiSecurity")

# Only this category may be marked not-applicable
NA_CATEGORY = "apiSecurity"

CATEGORY_DISPLAY = {
    "sast":        "SAST (Static Application Security Testing)",
    "dast":        "DAST (Dynamic Application Security Testing)",
    "appFirewall": "Application Firewall (WAF)",
    "apiSecurity": "API Security",
}

# Metadata fields that count toward knowledge-sharing completeness
KNOWLEDGE_FIELDS = (
    "description",
    "owner",
    "repoUrl",
    "language",
    "framework",
    "serverEnvironment",
    "authProfiles",
    "dataTypes",
)

# Rating thresholds for the 0-100 total
RATING_THRESHOLDS = [
    (76, "Excellent"),
    (51, "Good"),
    ( 0, "Needs Improvement"),
]


# ─── Configuration Tables ───────────────────────────────────────────────────

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_SCORING_DIR = PACKAGE_DIR / "data" / "scoring"

INTEGRATION_LEVELS_FILE = "integrationLevels.json"
TOOL_QUALITY_FILE = "toolQuality.json"
RISK_FACTORS_FILE = "riskFactors.json"

# Key used for inline comments inside the JSON tables
COMMENT_KEY = "//"


# ─── Output Configuration ───────────────────────────────────────────────────

@dataclass
class OutputConfig:
    """Output directory and format settings."""
    base_dir: str = ""
    timestamp: str = ""
    formats: list[str] = field(default_factory=lambda: [
        "json", "csv", "markdown"
    ])

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        if not self.base_dir:
            self.base_dir = os.path.join(
                os.getcwd(),
                f"appsec_scores_{self.timestamp}"
            )

    @property
    def run_dir(self) -> Path:
        return Path(self.base_dir)

    @property
    def json_dir(self) -> Path:
        return self.run_dir / "json"

    @property
    def csv_dir(self) -> Path:
        return self.run_dir / "csv"

    @property
    def reports_dir(self) -> Path:
        return self.run_dir / "reports"

    def create_directories(self):
        for d in [self.json_dir, self.csv_dir, self.reports_dir]:
            d.mkdir(parents=True, exist_ok=True)


# ─── Score History ──────────────────────────────────────────────────────────

@dataclass
class HistoryConfig:
    """Where computed scores are appended as an audit trail."""
    enabled: bool = True
    db_path: str = ""

    def __post_init__(self):
        if not self.db_path:
            self.db_path = str(Path.home() / ".appsec_scoring" / "score_history.db")


# ─── Master Configuration ───────────────────────────────────────────────────

@dataclass
class EngineConfig:
    """Top-level configuration for the scoring engine and its CLI."""
    scoring_dir: str = str(DEFAULT_SCORING_DIR)
    output: OutputConfig = field(default_factory=OutputConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    verbose: bool = False

    @classmethod
    def from_file(cls, path: str | Path) -> "EngineConfig":
        """Load configuration from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = cls()
        if data.get("scoring_dir"):
            config.scoring_dir = data["scoring_dir"]
        if "output" in data:
            for k, v in data["output"].items():
                if hasattr(config.output, k):
                    setattr(config.output, k, v)
        if "history" in data:
            for k, v in data["history"].items():
                if hasattr(config.history, k):
                    setattr(config.history, k, v)
        config.verbose = data.get("verbose", False)
        return config

    @property
    def scoring_path(self) -> Optional[Path]:
        return Path(self.scoring_dir).expanduser() if self.scoring_dir else None
