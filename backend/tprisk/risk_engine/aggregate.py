from __future__ import annotations

from collections.abc import Iterable

from tprisk.models import RiskCategory, RiskLevel
from tprisk.risk_engine.types import CategoryScore, OverallRiskAssessment

RISK_LEVEL_THRESHOLDS = (
    (80, RiskLevel.CRITICAL.value),
    (60, RiskLevel.HIGH.value),
    (40, RiskLevel.MEDIUM.value),
)

CATEGORY_TRIGGER_SCORE = 60

CATEGORY_RECOMMENDATIONS = {
    RiskCategory.DOCUMENTATION.value: (
        'Complete missing transfer pricing documentation',
        'Update functional and risk analysis',
    ),
    RiskCategory.ECONOMIC.value: (
        'Perform detailed benchmarking study',
        "Review arm's length pricing policies",
    ),
    RiskCategory.COMPLIANCE.value: (
        'Establish compliance monitoring system',
        'Review filing requirements across jurisdictions',
    ),
    RiskCategory.OPERATIONAL.value: (
        'Simplify inter-company transaction structure',
        'Implement centralized TP management',
    ),
    RiskCategory.REGULATORY.value: (
        'Monitor regulatory changes in key jurisdictions',
        'Consider advance pricing agreement (APA)',
    ),
}

ESCALATION_RECOMMENDATIONS = (
    'Consider engaging external transfer pricing advisor',
    'Implement immediate risk mitigation measures',
)


def risk_level_for_score(score: float) -> str:
    for threshold, level in RISK_LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW.value


def category_key(category: str) -> str:
    return str(category).strip().lower()


def recommendations_for(categories: Iterable[CategoryScore], risk_level: str) -> list[str]:
    recommendations: list[str] = []
    for category in categories:
        if category.score > CATEGORY_TRIGGER_SCORE:
            recommendations.extend(CATEGORY_RECOMMENDATIONS.get(category_key(category.category), ()))

    if risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        recommendations.extend(ESCALATION_RECOMMENDATIONS)
    return recommendations


def aggregate_overall_risk(category_scores: Iterable[CategoryScore]) -> OverallRiskAssessment:
    categories = tuple(category_scores)
    overall_score = sum(category.score * category.weight for category in categories)
    # Guard against float drift such as 100 * (0.25 + 0.2 + ...) = 100.00000000000001.
    overall_score = round(overall_score, 10)
    risk_level = risk_level_for_score(overall_score)

    return OverallRiskAssessment(
        overall_score=overall_score,
        risk_level=risk_level,
        categories=categories,
        recommendations=tuple(recommendations_for(categories, risk_level)),
    )
