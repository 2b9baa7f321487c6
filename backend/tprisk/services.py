from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Iterable
from datetime import date
from typing import Any

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from tprisk.models import Comparable, Entity, RiskAssessment, Transaction
from tprisk.risk_engine import types
from tprisk.risk_engine.comparables import filter_comparables
from tprisk.risk_engine.engine import RiskEngine, serialize_engine_result
from tprisk.risk_engine.jurisdictions import EVEN_SPLIT
from tprisk.risk_engine.mitigation import MitigationPlanTracker, default_plan
from tprisk.risk_engine.statistics import histogram, validity_warnings
from tprisk.risk_engine.types import EngineResult, MitigationAction, StatisticalResult

logger = logging.getLogger(__name__)

MITIGATION_PLAN_SESSION_KEY = 'tprisk_mitigation_plan'


def entity_snapshot(entity: Entity) -> types.Entity:
    return types.Entity(
        id=str(entity.id),
        name=entity.name,
        country_code=entity.country_code,
        entity_type=entity.entity_type,
        business_description=entity.business_description,
        functional_analysis=dict(entity.functional_analysis or {}),
        financial_data=entity.financial_data or {},
    )


def transaction_snapshot(record: Transaction) -> types.Transaction:
    return types.Transaction(
        id=str(record.id),
        amount=float(record.amount or 0),
        transaction_type=record.transaction_type,
        description=record.description,
        pricing_method=record.pricing_method,
        documentation_status=record.documentation_status,
        arm_length_range=dict(record.arm_length_range or {}),
        entity_id=str(record.entity_id) if record.entity_id else None,
    )


def comparable_snapshot(record: Comparable) -> types.Comparable:
    return types.Comparable(
        id=str(record.id),
        comparable_name=record.comparable_name,
        country=record.country,
        industry=record.industry,
        reliability_score=float(record.reliability_score),
        financial_data=record.financial_data or {},
    )


def assessment_snapshot(record: RiskAssessment) -> types.PriorAssessment:
    return types.PriorAssessment(
        id=str(record.id),
        assessment_date=record.assessment_date,
        risk_level=record.risk_level,
        entity_id=str(record.entity_id) if record.entity_id else None,
        transaction_id=str(record.transaction_id) if record.transaction_id else None,
    )


def looks_like_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def load_entities(ids: Iterable[str] | None = None) -> list[types.Entity]:
    queryset = Entity.objects.all()
    if ids is not None:
        queryset = queryset.filter(pk__in=list(ids))
    return [entity_snapshot(entity) for entity in queryset.order_by('name', 'id')]


def load_transactions(entity_id: str | None = None, ids: Iterable[str] | None = None) -> list[types.Transaction]:
    queryset = Transaction.objects.all()
    if entity_id is not None:
        queryset = queryset.filter(entity_id=entity_id)
    if ids is not None:
        queryset = queryset.filter(pk__in=list(ids))
    return [transaction_snapshot(record) for record in queryset.order_by('created_at', 'id')]


def load_comparables(
    country: str | None = None,
    industry: str | None = None,
    min_reliability: float | None = None,
) -> list[types.Comparable]:
    comparables = [comparable_snapshot(record) for record in Comparable.objects.order_by('comparable_name', 'id')]
    return filter_comparables(comparables, country=country, industry=industry, min_reliability=min_reliability)


def load_prior_assessments(
    entity_id: str | None = None,
    transaction_id: str | None = None,
) -> list[types.PriorAssessment]:
    queryset = RiskAssessment.objects.all()
    if entity_id is not None:
        queryset = queryset.filter(entity_id=entity_id)
    if transaction_id is not None:
        queryset = queryset.filter(transaction_id=transaction_id)
    return [assessment_snapshot(record) for record in queryset.order_by('-assessment_date')]


def default_attribution() -> str:
    return getattr(settings, 'TPRISK_JURISDICTION_ATTRIBUTION', EVEN_SPLIT) or EVEN_SPLIT


def build_engine(entity_id: str | None = None, attribution: str | None = None) -> RiskEngine:
    if entity_id is not None:
        entities = load_entities(ids=[entity_id])
    else:
        entities = load_entities()
    return RiskEngine(
        entities=entities,
        transactions=load_transactions(entity_id=entity_id),
        assessments=load_prior_assessments(entity_id=entity_id),
        attribution=attribution or default_attribution(),
    )


def run_assessment(
    entity_id: str | None = None,
    overrides: dict[str, bool] | None = None,
    attribution: str | None = None,
    today: date | None = None,
    clears: Iterable[str] = (),
    toggles: Iterable[str] = (),
) -> EngineResult:
    engine = build_engine(entity_id=entity_id, attribution=attribution)
    return engine.run(overrides=overrides, today=today, clears=clears, toggles=toggles)


def persist_assessment(result: EngineResult, entity_id: str | None = None) -> RiskAssessment:
    risk_factors = {
        item.id: {
            'computed': item.computed,
            'override': item.override,
            'present': item.present,
        }
        for item in result.factors
    }
    risk_factors['categories'] = {
        item.category: {'score': item.score, 'weight': item.weight}
        for item in result.categories
    }

    with transaction.atomic():
        assessment = RiskAssessment.objects.create(
            entity_id=entity_id,
            assessment_date=timezone.now(),
            overall_score=max(0.0, min(100.0, result.overall.overall_score)),
            risk_level=result.overall.risk_level,
            risk_factors=risk_factors,
            recommendations=list(result.overall.recommendations),
            catalog_version=result.catalog_version,
        )

    logger.info(
        'Persisted risk assessment %s: score %.2f, level %s.',
        assessment.pk,
        result.overall.overall_score,
        result.overall.risk_level,
    )
    return assessment


def build_assessment_response(result: EngineResult, assessment: RiskAssessment | None = None) -> dict[str, Any]:
    payload = serialize_engine_result(result)
    payload['assessment_id'] = str(assessment.pk) if assessment is not None else None
    payload['assessed_at'] = assessment.assessment_date if assessment is not None else timezone.now()
    return payload


def _finite_or_none(value: float | None) -> float | None:
    if value is None or math.isinf(value):
        return None
    return value


def build_statistics_response(result: StatisticalResult | None, observations: list[float]) -> dict[str, Any]:
    if result is None:
        return {'statistics': None, 'warnings': [], 'histogram': []}

    return {
        'statistics': {
            'metric': result.metric,
            'count': result.count,
            'mean': result.mean,
            'median': result.median,
            'min': result.min,
            'max': result.max,
            'q1': result.q1,
            'q3': result.q3,
            'iqr': result.iqr,
            'standard_deviation': result.standard_deviation,
            'coefficient_of_variation': _finite_or_none(result.coefficient_of_variation),
            'arm_length_range': dict(result.arm_length_range),
            'meets_reliability_standard': result.meets_reliability_standard,
        },
        'warnings': validity_warnings(result),
        'histogram': [
            {
                'range': item.label,
                'lower': item.lower,
                'upper': item.upper,
                'midpoint': item.midpoint,
                'count': item.count,
            }
            for item in histogram(observations)
        ],
    }


def load_mitigation_plan(session) -> MitigationPlanTracker:
    payload = session.get(MITIGATION_PLAN_SESSION_KEY)
    if payload is None:
        return default_plan()
    return MitigationPlanTracker.from_dict(payload)


def save_mitigation_plan(session, tracker: MitigationPlanTracker) -> None:
    session[MITIGATION_PLAN_SESSION_KEY] = tracker.to_dict()
    session.modified = True


def serialize_action(action: MitigationAction) -> dict[str, Any]:
    return {
        'id': action.id,
        'title': action.title,
        'description': action.description,
        'priority': action.priority,
        'category': action.category,
        'status': action.status,
        'estimated_effort': action.estimated_effort,
        'expected_risk_reduction': action.expected_risk_reduction,
        'resources_needed': list(action.resources_needed),
        'progress': action.progress,
        'due_date': action.due_date,
        'assigned_to': action.assigned_to,
        'cost_estimate': action.cost_estimate,
    }


def build_plan_response(tracker: MitigationPlanTracker) -> dict[str, Any]:
    return {
        'actions': [serialize_action(action) for action in tracker.sorted_actions()],
        'summary': tracker.summary(),
    }
