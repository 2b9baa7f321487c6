from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from tprisk.risk_engine.aggregate import aggregate_overall_risk
from tprisk.risk_engine.categories import score_categories
from tprisk.risk_engine.evaluator import (
    clear_override,
    collect_overrides,
    evaluate_risk_factors,
    factor_risk_score,
    factors_by_category,
    toggle_factor,
)
from tprisk.risk_engine.factors import DEFAULT_CATALOG, RiskFactorCatalog
from tprisk.risk_engine.jurisdictions import EVEN_SPLIT, model_jurisdictions
from tprisk.risk_engine.types import (
    EngineResult,
    Entity,
    JurisdictionRisk,
    OverallRiskAssessment,
    PriorAssessment,
    Transaction,
)

logger = logging.getLogger(__name__)


@dataclass
class RiskEngine:
    entities: list[Entity]
    transactions: list[Transaction]
    assessments: list[PriorAssessment] = field(default_factory=list)
    catalog: RiskFactorCatalog = DEFAULT_CATALOG
    attribution: str = EVEN_SPLIT

    def run(
        self,
        overrides: dict[str, bool] | None = None,
        today: date | None = None,
        clears: Iterable[str] = (),
        toggles: Iterable[str] = (),
    ) -> EngineResult:
        factors = evaluate_risk_factors(
            self.entities,
            self.transactions,
            self.assessments,
            catalog=self.catalog,
            overrides=overrides,
            today=today,
        )
        for factor_id in clears:
            factors = clear_override(factors, factor_id)
        for factor_id in toggles:
            factors = toggle_factor(factors, factor_id)

        categories = score_categories(self.entities, self.transactions, factors)
        overall = aggregate_overall_risk(categories)
        jurisdictions = model_jurisdictions(self.entities, self.transactions, attribution=self.attribution)

        logger.debug(
            'Risk engine run: %s entities, %s transactions, overall %.2f (%s).',
            len(self.entities),
            len(self.transactions),
            overall.overall_score,
            overall.risk_level,
        )

        return EngineResult(
            factors=factors,
            categories=categories,
            overall=overall,
            jurisdictions=jurisdictions,
            factor_risk_score=factor_risk_score(factors),
            catalog_version=self.catalog.version,
        )


def serialize_overall(overall: OverallRiskAssessment) -> dict[str, Any]:
    return {
        'overall_score': overall.overall_score,
        'risk_level': overall.risk_level,
        'recommendations': list(overall.recommendations),
    }


def serialize_jurisdiction(item: JurisdictionRisk) -> dict[str, Any]:
    return {
        'country_code': item.country_code,
        'country_name': item.country_name,
        'entity_count': item.entity_count,
        'transaction_value': item.transaction_value,
        'risk_score': item.risk_score,
        'risk_level': item.risk_level,
        'risk_factors': list(item.risk_factors),
        'compliance_requirements': list(item.compliance_requirements),
        'deadlines': list(item.deadlines),
        'recommendations': list(item.recommendations),
    }


def serialize_engine_result(result: EngineResult) -> dict[str, Any]:
    return {
        'overall': serialize_overall(result.overall),
        'categories': [
            {
                'category': item.category,
                'score': item.score,
                'weight': item.weight,
                'factors': list(item.factors),
            }
            for item in result.categories
        ],
        'factors': [
            {
                'id': item.id,
                'category': item.category,
                'title': item.definition.title,
                'description': item.definition.description,
                'severity': item.definition.severity,
                'impact': item.definition.impact,
                'recommendations': list(item.definition.recommendations),
                'computed': item.computed,
                'override': item.override,
                'present': item.present,
            }
            for item in result.factors
        ],
        'factor_summary': {
            category: {'total': bucket['total'], 'present': bucket['present']}
            for category, bucket in factors_by_category(result.factors).items()
        },
        'overrides': collect_overrides(result.factors),
        'factor_risk_score': result.factor_risk_score,
        'jurisdictions': [serialize_jurisdiction(item) for item in result.jurisdictions],
        'catalog_version': result.catalog_version,
    }
