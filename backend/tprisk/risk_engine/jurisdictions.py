from __future__ import annotations

import logging
from collections.abc import Iterable

from tprisk.models import EntityType, RiskLevel, TransactionType
from tprisk.risk_engine.aggregate import risk_level_for_score
from tprisk.risk_engine.country import normalize_country_code
from tprisk.risk_engine.jurisdiction_rules import get_jurisdiction_rule
from tprisk.risk_engine.types import Entity, JurisdictionRisk, Transaction

logger = logging.getLogger(__name__)

EVEN_SPLIT = 'even_split'
ENTITY_ATTRIBUTION = 'entity'
ATTRIBUTION_MODES = (EVEN_SPLIT, ENTITY_ATTRIBUTION)

LARGE_ENTITY_REVENUE = 100_000_000
LARGE_TRANSACTION_AMOUNT = 10_000_000

LARGE_ENTITY_ADJUSTMENT = 10
PARENT_ENTITY_ADJUSTMENT = 5
INTANGIBLE_TRANSACTION_ADJUSTMENT = 5
LARGE_TRANSACTION_ADJUSTMENT = 3


def _level_recommendations(risk_level: str) -> list[str]:
    recommendations = []
    if risk_level == RiskLevel.CRITICAL:
        recommendations.append('Consider engaging local transfer pricing expert')
        recommendations.append('Implement comprehensive documentation strategy')
    if risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        recommendations.append('Monitor local regulatory developments closely')
        recommendations.append('Consider advance pricing agreement (APA)')
    return recommendations


def _transaction_adjustment(transaction: Transaction) -> int:
    adjustment = 0
    if transaction.transaction_type == TransactionType.INTANGIBLE_PROPERTY:
        adjustment += INTANGIBLE_TRANSACTION_ADJUSTMENT
    if (transaction.amount or 0) > LARGE_TRANSACTION_AMOUNT:
        adjustment += LARGE_TRANSACTION_ADJUSTMENT
    return adjustment


def _target_jurisdictions(
    transaction: Transaction,
    jurisdictions: dict[str, JurisdictionRisk],
    entity_countries: dict[str, str],
    attribution: str,
) -> list[str]:
    if attribution == ENTITY_ATTRIBUTION and transaction.entity_id is not None:
        country_code = entity_countries.get(str(transaction.entity_id))
        if country_code in jurisdictions:
            return [country_code]
    return list(jurisdictions)


def model_jurisdictions(
    entities: Iterable[Entity],
    transactions: Iterable[Transaction],
    attribution: str = EVEN_SPLIT,
) -> list[JurisdictionRisk]:
    if attribution not in ATTRIBUTION_MODES:
        logger.warning('Unknown jurisdiction attribution mode %r, using %s.', attribution, EVEN_SPLIT)
        attribution = EVEN_SPLIT

    jurisdictions: dict[str, JurisdictionRisk] = {}
    large_entity: set[str] = set()
    has_parent: set[str] = set()
    entity_countries: dict[str, str] = {}

    for entity in entities:
        country_code = normalize_country_code(entity.country_code)
        entity_countries[str(entity.id)] = country_code

        profile = jurisdictions.get(country_code)
        if profile is None:
            rule = get_jurisdiction_rule(country_code)
            profile = JurisdictionRisk(
                country_code=country_code,
                country_name=rule.display_name(),
                entity_count=0,
                transaction_value=0.0,
                risk_score=float(rule.base_risk),
                risk_level=risk_level_for_score(rule.base_risk),
                risk_factors=list(rule.risk_factors),
                compliance_requirements=list(rule.requirements),
                deadlines=list(rule.deadlines),
            )
            jurisdictions[country_code] = profile
        profile.entity_count += 1

        revenue = entity.financial_data.metric('revenue')
        if revenue is not None and revenue > LARGE_ENTITY_REVENUE and country_code not in large_entity:
            large_entity.add(country_code)
            profile.risk_score += LARGE_ENTITY_ADJUSTMENT
        if entity.entity_type == EntityType.PARENT and country_code not in has_parent:
            has_parent.add(country_code)
            profile.risk_score += PARENT_ENTITY_ADJUSTMENT

    if jurisdictions:
        for transaction in transactions:
            amount = float(transaction.amount or 0)
            targets = _target_jurisdictions(transaction, jurisdictions, entity_countries, attribution)
            adjustment = _transaction_adjustment(transaction)
            for country_code in targets:
                profile = jurisdictions[country_code]
                profile.transaction_value += amount / len(targets)
                profile.risk_score += adjustment

    for country_code, profile in jurisdictions.items():
        profile.risk_level = risk_level_for_score(profile.risk_score)
        profile.recommendations = (
            _level_recommendations(profile.risk_level)
            + get_jurisdiction_rule(country_code).recommendations()
        )

    logger.debug('Modelled %s jurisdictions using %s attribution.', len(jurisdictions), attribution)
    return sorted(jurisdictions.values(), key=lambda item: (-item.risk_score, item.country_code))
