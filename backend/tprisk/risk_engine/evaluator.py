from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date

from tprisk.risk_engine.factors import DEFAULT_CATALOG, RiskFactorCatalog
from tprisk.risk_engine.types import (
    Entity,
    FactorContext,
    PriorAssessment,
    RiskFactorInstance,
    Transaction,
)

logger = logging.getLogger(__name__)


def evaluate_risk_factors(
    entities: Iterable[Entity],
    transactions: Iterable[Transaction],
    assessments: Iterable[PriorAssessment] = (),
    catalog: RiskFactorCatalog = DEFAULT_CATALOG,
    overrides: Mapping[str, bool] | None = None,
    today: date | None = None,
) -> list[RiskFactorInstance]:
    context = FactorContext(
        entities=tuple(entities),
        transactions=tuple(transactions),
        assessments=tuple(assessments),
        today=today or date.today(),
    )
    overrides = overrides or {}

    instances = []
    for definition in catalog.definitions:
        computed = bool(definition.predicate(context))
        override = overrides.get(definition.id)
        instances.append(
            RiskFactorInstance(
                definition=definition,
                computed=computed,
                override=None if override is None else bool(override),
            )
        )

    logger.debug(
        'Evaluated %s risk factors (catalog v%s): %s present.',
        len(instances),
        catalog.version,
        sum(1 for item in instances if item.present),
    )
    return instances


def toggle_factor(instances: Iterable[RiskFactorInstance], factor_id: str) -> list[RiskFactorInstance]:
    return [
        item.with_override(not item.present) if item.id == factor_id else item
        for item in instances
    ]


def clear_override(instances: Iterable[RiskFactorInstance], factor_id: str) -> list[RiskFactorInstance]:
    return [item.with_override(None) if item.id == factor_id else item for item in instances]


def collect_overrides(instances: Iterable[RiskFactorInstance]) -> dict[str, bool]:
    return {item.id: item.override for item in instances if item.override is not None}


def present_factors(instances: Iterable[RiskFactorInstance]) -> list[RiskFactorInstance]:
    return [item for item in instances if item.present]


def factor_risk_score(instances: Iterable[RiskFactorInstance]) -> float:
    instances = list(instances)
    if not instances:
        return 0.0
    total_impact = sum(item.definition.impact for item in instances if item.present)
    return total_impact / len(instances)


def factors_by_category(instances: Iterable[RiskFactorInstance]) -> dict[str, dict]:
    grouped: dict[str, dict] = {}
    for item in instances:
        bucket = grouped.setdefault(item.category, {'total': 0, 'present': 0, 'factors': []})
        bucket['total'] += 1
        bucket['factors'].append(item)
        if item.present:
            bucket['present'] += 1
    return grouped
