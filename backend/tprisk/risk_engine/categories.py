from __future__ import annotations

from collections.abc import Iterable

from tprisk.models import DocumentationStatus, RiskCategory, TransactionType
from tprisk.risk_engine.country import distinct_countries, normalize_country_code
from tprisk.risk_engine.types import CategoryScore, Entity, RiskFactorInstance, Transaction

CATEGORY_WEIGHTS = {
    RiskCategory.DOCUMENTATION.value: 0.25,
    RiskCategory.COMPLIANCE.value: 0.20,
    RiskCategory.ECONOMIC.value: 0.30,
    RiskCategory.OPERATIONAL.value: 0.15,
    RiskCategory.REGULATORY.value: 0.10,
}

CATEGORY_LABELS = {
    RiskCategory.DOCUMENTATION.value: ('Missing documentation', 'Incomplete analysis', 'Outdated studies'),
    RiskCategory.COMPLIANCE.value: ('Deadline adherence', 'Regulatory changes', 'Filing requirements'),
    RiskCategory.ECONOMIC.value: ("Arm's length pricing", 'Benchmarking quality', 'Profit margins'),
    RiskCategory.OPERATIONAL.value: ('Business complexity', 'Related party dependencies', 'Geographic spread'),
    RiskCategory.REGULATORY.value: ('Jurisdiction risk', 'BEPS compliance', 'Audit history'),
}

COMPLIANCE_HIGH_RISK_COUNTRIES = frozenset({'US', 'DE', 'FR', 'UK', 'AU'})
BEPS_ACTION_13_COUNTRIES = frozenset({'US', 'UK', 'DE', 'FR', 'AU', 'CA', 'JP'})


def _clamp(score: float) -> float:
    return float(max(0.0, min(100.0, score)))


def documentation_risk(entities: Iterable[Entity], transactions: Iterable[Transaction]) -> float:
    score = 0
    for entity in entities:
        if not entity.functional_analysis:
            score += 20
        if not entity.financial_data:
            score += 15
        if not entity.business_description:
            score += 10

    for transaction in transactions:
        if not transaction.description:
            score += 15
        if not transaction.pricing_method:
            score += 20
        if transaction.documentation_status == DocumentationStatus.PENDING:
            score += 10

    return _clamp(score)


def compliance_risk(entities: Iterable[Entity]) -> float:
    entities = list(entities)
    score = 0

    jurisdiction_count = len(distinct_countries(entities))
    if jurisdiction_count > 3:
        score += 30
    elif jurisdiction_count > 1:
        score += 15

    for entity in entities:
        if normalize_country_code(entity.country_code) in COMPLIANCE_HIGH_RISK_COUNTRIES:
            score += 10

    return _clamp(score)


def economic_risk(transactions: Iterable[Transaction]) -> float:
    transactions = list(transactions)
    score = 0

    for transaction in transactions:
        amount = transaction.amount or 0
        if amount > 10_000_000:
            score += 20
        elif amount > 1_000_000:
            score += 10

        if not transaction.arm_length_range:
            score += 25

        if transaction.transaction_type == TransactionType.INTANGIBLE_PROPERTY:
            score += 15
        if transaction.transaction_type == TransactionType.FINANCIAL_TRANSACTIONS:
            score += 10

    return _clamp(score / max(1, len(transactions)))


def operational_risk(entities: Iterable[Entity], transactions: Iterable[Transaction]) -> float:
    entity_count = len(list(entities))
    transaction_count = len(list(transactions))
    score = 0

    if entity_count > 10:
        score += 20
    elif entity_count > 5:
        score += 10

    if transaction_count > 20:
        score += 15
    elif transaction_count > 10:
        score += 8

    return _clamp(score)


def regulatory_risk(entities: Iterable[Entity]) -> float:
    score = 0
    for entity in entities:
        if normalize_country_code(entity.country_code) in BEPS_ACTION_13_COUNTRIES:
            score += 15
    return _clamp(score)


def score_categories(
    entities: Iterable[Entity],
    transactions: Iterable[Transaction],
    factors: Iterable[RiskFactorInstance] | None = None,
) -> list[CategoryScore]:
    entities = list(entities)
    transactions = list(transactions)

    present_titles: dict[str, list[str]] = {}
    for factor in factors or ():
        if factor.present:
            present_titles.setdefault(factor.category, []).append(factor.definition.title)

    scores = {
        RiskCategory.DOCUMENTATION.value: documentation_risk(entities, transactions),
        RiskCategory.COMPLIANCE.value: compliance_risk(entities),
        RiskCategory.ECONOMIC.value: economic_risk(transactions),
        RiskCategory.OPERATIONAL.value: operational_risk(entities, transactions),
        RiskCategory.REGULATORY.value: regulatory_risk(entities),
    }

    return [
        CategoryScore(
            category=category,
            score=score,
            weight=CATEGORY_WEIGHTS[category],
            factors=CATEGORY_LABELS[category] + tuple(present_titles.get(category, [])),
        )
        for category, score in scores.items()
    ]

