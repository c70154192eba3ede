"""
Scoring data models — Input record and structured output types for the scoring engine.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Optional, Union


def _snake(name: str) -> str:
    """repoUrl -> repo_url, apiSecurityNA -> api_security_na."""
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


@dataclass(frozen=True)
class ApplicationRecord:
    """
    Read-only snapshot of an application as handed over by the persistence layer.
    Every scoring field is optional; missing values are None.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    company: Optional[str] = None

    # Knowledge-sharing metadata
    description: Optional[str] = None
    owner: Optional[str] = None
    repo_url: Optional[str] = None
    language: Optional[str] = None
    framework: Optional[str] = None
    server_environment: Optional[str] = None
    auth_profiles: Optional[str] = None
    data_types: Optional[str] = None
    metadata_last_reviewed: Union[datetime, str, None] = None

    # Exposure
    facing: Optional[str] = None
    deployment_type: Optional[str] = None
    interfaces: Optional[str] = None

    # Security tooling, one tool/level pair per category
    sast_tool: Optional[str] = None
    sast_integration_level: Optional[int] = None
    dast_tool: Optional[str] = None
    dast_integration_level: Optional[int] = None
    app_firewall_tool: Optional[str] = None
    app_firewall_integration_level: Optional[int] = None
    api_security_tool: Optional[str] = None
    api_security_integration_level: Optional[int] = None
    api_security_na: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApplicationRecord":
        """Build a record from camelCase (persistence) or snake_case keys; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            attr = key if key in known else _snake(key)
            if attr in known:
                kwargs[attr] = value
        return cls(**kwargs)

    def value(self, field_name: str) -> Any:
        """Look up a field by its camelCase name (e.g. 'repoUrl', 'sastTool')."""
        return getattr(self, _snake(field_name), None)

    def tool(self, category: str) -> Optional[str]:
        return self.value(f"{category}Tool")

    def integration_level(self, category: str) -> Any:
        return self.value(f"{category}IntegrationLevel")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "company": self.company,
            "facing": self.facing,
            "dataTypes": self.data_types,
            "metadataLastReviewed": (
                self.metadata_last_reviewed.isoformat()
                if isinstance(self.metadata_last_reviewed, datetime)
                else self.metadata_last_reviewed
            ),
        }


@dataclass(frozen=True)
class ScoreResult:
    """The three integer scores for one computation."""
    knowledge_score: int = 0    # 0-50
    tool_score: int = 0         # 0-50
    total_score: int = 0        # 0-100

    def to_dict(self) -> dict:
        return {
            "knowledgeScore": self.knowledge_score,
            "toolScore": self.tool_score,
            "totalScore": self.total_score,
        }


@dataclass
class CategoryScore:
    """Tool-usage detail for a single security-tool category."""
    category: str
    display_name: str
    risk_weight: float = 1.0
    max_points: float = 0.0
    achieved_points: float = 0.0
    integration_weight: float = 0.0
    tool_weight: float = 0.0
    tool: Optional[str] = None
    integration_level: Any = None
    not_applicable: bool = False

    @property
    def implemented(self) -> bool:
        return self.not_applicable or self.achieved_points > 0

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "display_name": self.display_name,
            "tool": self.tool,
            "integration_level": self.integration_level,
            "not_applicable": self.not_applicable,
            "risk_weight": self.risk_weight,
            "max_points": round(self.max_points, 2),
            "achieved_points": round(self.achieved_points, 2),
            "integration_weight": self.integration_weight,
            "tool_weight": self.tool_weight,
        }


@dataclass
class KnowledgeBreakdown:
    """Completeness vs. freshness split of the knowledge-sharing score."""
    fields_filled: int = 0
    total_fields: int = 0
    completeness_score: int = 0     # out of 40
    review_score: int = 0           # out of 10
    last_reviewed: Union[datetime, str, None] = None
    missing_fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        last = self.last_reviewed
        return {
            "fieldsFilled": self.fields_filled,
            "totalFields": self.total_fields,
            "completenessScore": self.completeness_score,
            "reviewScore": self.review_score,
            "lastReviewed": last.isoformat() if isinstance(last, datetime) else last,
            "missingFields": list(self.missing_fields),
        }


@dataclass
class ScoreBreakdown:
    """Presentation view over a score: knowledge split plus per-category tool detail."""
    knowledge_sharing: KnowledgeBreakdown = field(default_factory=KnowledgeBreakdown)
    tool_usage: list[CategoryScore] = field(default_factory=list)
    total_possible_points: float = 0.0
    total_achieved_points: float = 0.0

    def to_dict(self) -> dict:
        return {
            "knowledgeSharing": self.knowledge_sharing.to_dict(),
            "toolUsage": {
                "categories": [c.to_dict() for c in self.tool_usage],
                "totalPossiblePoints": round(self.total_possible_points, 2),
                "totalAchievedPoints": round(self.total_achieved_points, 2),
            },
        }


@dataclass
class ScoredApplication:
    """An application together with its score, breakdown and rating, for reporting."""
    application: ApplicationRecord
    result: ScoreResult
    breakdown: ScoreBreakdown
    rating: str = "Needs Improvement"

    def to_dict(self) -> dict:
        return {
            "application": self.application.to_dict(),
            **self.result.to_dict(),
            "rating": self.rating,
            "breakdown": self.breakdown.to_dict(),
        }
