from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, replace
from datetime import date
from typing import Any

from tprisk.models import ActionStatus, RiskCategory, RiskLevel
from tprisk.risk_engine.aggregate import CATEGORY_RECOMMENDATIONS, ESCALATION_RECOMMENDATIONS
from tprisk.risk_engine.types import MitigationAction, OverallRiskAssessment

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {
    RiskLevel.CRITICAL.value: 4,
    RiskLevel.HIGH.value: 3,
    RiskLevel.MEDIUM.value: 2,
    RiskLevel.LOW.value: 1,
}

STATUS_ORDER = {
    ActionStatus.PENDING.value: 3,
    ActionStatus.IN_PROGRESS.value: 2,
    ActionStatus.COMPLETED.value: 1,
}

CATEGORIES = tuple(choice.value for choice in RiskCategory)

DEFAULT_ACTIONS = (
    {
        'title': 'Complete Transfer Pricing Documentation',
        'description': 'Prepare comprehensive transfer pricing studies for all material controlled transactions',
        'priority': RiskLevel.CRITICAL.value,
        'category': RiskCategory.DOCUMENTATION.value,
        'estimated_effort': '4-6 weeks',
        'expected_risk_reduction': 25,
        'cost_estimate': '$50,000 - $100,000',
        'resources_needed': ['Transfer pricing specialist', 'Financial data', 'Legal review'],
    },
    {
        'title': 'Update Benchmarking Studies',
        'description': 'Refresh economic analysis with current market data and expanded comparable search',
        'priority': RiskLevel.HIGH.value,
        'category': RiskCategory.ECONOMIC.value,
        'estimated_effort': '3-4 weeks',
        'expected_risk_reduction': 20,
        'cost_estimate': '$25,000 - $50,000',
        'resources_needed': ['Economic analyst', 'Database access', 'Statistical software'],
    },
    {
        'title': 'Implement Compliance Monitoring System',
        'description': 'Set up automated system to track filing deadlines and regulatory changes',
        'priority': RiskLevel.MEDIUM.value,
        'category': RiskCategory.COMPLIANCE.value,
        'estimated_effort': '2-3 weeks',
        'expected_risk_reduction': 15,
        'cost_estimate': '$10,000 - $25,000',
        'resources_needed': ['Compliance software', 'Process documentation', 'Training'],
    },
    {
        'title': 'Review Inter-company Agreements',
        'description': 'Update and standardize all inter-company service and financing agreements',
        'priority': RiskLevel.HIGH.value,
        'category': RiskCategory.OPERATIONAL.value,
        'estimated_effort': '3-5 weeks',
        'expected_risk_reduction': 18,
        'cost_estimate': '$30,000 - $60,000',
        'resources_needed': ['Legal counsel', 'Tax advisor', 'Business stakeholders'],
    },
    {
        'title': 'Consider Advance Pricing Agreement',
        'description': 'Evaluate and potentially file for APA in high-risk jurisdictions',
        'priority': RiskLevel.MEDIUM.value,
        'category': RiskCategory.REGULATORY.value,
        'estimated_effort': '6-12 months',
        'expected_risk_reduction': 30,
        'cost_estimate': '$100,000 - $200,000',
        'resources_needed': ['APA specialist', 'Economic analysis', 'Government liaison'],
    },
)

SEEDED_RISK_REDUCTION = {
    RiskLevel.CRITICAL.value: 20,
    RiskLevel.HIGH.value: 15,
    RiskLevel.MEDIUM.value: 10,
    RiskLevel.LOW.value: 5,
}


class ActionNotFound(KeyError):
    pass


def _choice(value: Any, allowed: Iterable[str], field_name: str) -> str:
    normalized = str(value).strip().lower()
    if normalized not in allowed:
        raise ValueError(f'Invalid {field_name}: {value!r}.')
    return normalized


def _clamp_progress(value: Any) -> int:
    return max(0, min(100, int(round(float(value)))))


def _recommendation_categories() -> dict[str, str]:
    mapping = {}
    for category, recommendations in CATEGORY_RECOMMENDATIONS.items():
        for recommendation in recommendations:
            mapping[recommendation] = category
    return mapping


class MitigationPlanTracker:
    def __init__(self, actions: Iterable[MitigationAction] | None = None):
        self._actions: list[MitigationAction] = list(actions or [])
        self._sequence = len(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self):
        return iter(list(self._actions))

    @property
    def actions(self) -> list[MitigationAction]:
        return list(self._actions)

    def _next_id(self) -> str:
        existing = {action.id for action in self._actions}
        while True:
            self._sequence += 1
            candidate = f'action_{self._sequence}'
            if candidate not in existing:
                return candidate

    def get(self, action_id: str) -> MitigationAction:
        for action in self._actions:
            if action.id == action_id:
                return action
        raise ActionNotFound(action_id)

    def _replace(self, action_id: str, **changes) -> MitigationAction:
        for index, action in enumerate(self._actions):
            if action.id == action_id:
                updated = replace(action, **changes)
                self._actions[index] = updated
                return updated
        raise ActionNotFound(action_id)

    def add(
        self,
        title: str,
        description: str,
        *,
        priority: str = RiskLevel.MEDIUM.value,
        category: str = RiskCategory.DOCUMENTATION.value,
        estimated_effort: str = '',
        expected_risk_reduction: float = 0,
        resources_needed: Iterable[str] | None = None,
        due_date: date | None = None,
        assigned_to: str | None = None,
        cost_estimate: str | None = None,
        action_id: str | None = None,
    ) -> MitigationAction:
        if not title or not description:
            raise ValueError('Mitigation actions require a title and a description.')
        if action_id is not None and any(action.id == action_id for action in self._actions):
            raise ValueError(f'Duplicate mitigation action id: {action_id!r}.')

        action = MitigationAction(
            id=action_id or self._next_id(),
            title=title,
            description=description,
            priority=_choice(priority, PRIORITY_ORDER, 'priority'),
            category=_choice(category, CATEGORIES, 'category'),
            status=ActionStatus.PENDING.value,
            estimated_effort=estimated_effort or '',
            expected_risk_reduction=max(0.0, min(100.0, float(expected_risk_reduction or 0))),
            resources_needed=list(resources_needed or []),
            progress=0,
            due_date=due_date,
            assigned_to=assigned_to,
            cost_estimate=cost_estimate,
        )
        self._actions.append(action)
        logger.debug('Added mitigation action %s (%s).', action.id, action.title)
        return action

    def update_status(self, action_id: str, status: str) -> MitigationAction:
        status = _choice(status, STATUS_ORDER, 'status')
        changes: dict[str, Any] = {'status': status}
        if status == ActionStatus.COMPLETED:
            changes['progress'] = 100
        elif status == ActionStatus.PENDING:
            changes['progress'] = 0
        return self._replace(action_id, **changes)

    def update_progress(self, action_id: str, progress: float) -> MitigationAction:
        return self._replace(action_id, progress=_clamp_progress(progress))

    def set_due_date(self, action_id: str, due_date: date | None) -> MitigationAction:
        return self._replace(action_id, due_date=due_date)

    def assign(self, action_id: str, assignee: str | None) -> MitigationAction:
        return self._replace(action_id, assigned_to=assignee or None)

    def _count(self, status: str) -> int:
        return sum(1 for action in self._actions if action.status == status)

    @property
    def completed_count(self) -> int:
        return self._count(ActionStatus.COMPLETED.value)

    @property
    def in_progress_count(self) -> int:
        return self._count(ActionStatus.IN_PROGRESS.value)

    @property
    def pending_count(self) -> int:
        return self._count(ActionStatus.PENDING.value)

    @property
    def total_risk_reduction_credit(self) -> float:
        return sum(
            action.expected_risk_reduction
            for action in self._actions
            if action.status == ActionStatus.COMPLETED
        )

    @property
    def plan_progress_percent(self) -> float:
        if not self._actions:
            return 0.0
        return self.completed_count / len(self._actions) * 100

    def sorted_actions(self) -> list[MitigationAction]:
        return sorted(
            self._actions,
            key=lambda action: (
                PRIORITY_ORDER.get(action.priority, 0),
                STATUS_ORDER.get(action.status, 0),
            ),
            reverse=True,
        )

    def summary(self) -> dict[str, Any]:
        return {
            'total_actions': len(self._actions),
            'completed_count': self.completed_count,
            'in_progress_count': self.in_progress_count,
            'pending_count': self.pending_count,
            'total_risk_reduction_credit': self.total_risk_reduction_credit,
            'plan_progress_percent': self.plan_progress_percent,
        }

    def seed_from_recommendations(self, assessment: OverallRiskAssessment) -> list[MitigationAction]:
        existing_titles = {action.title for action in self._actions}
        source_categories = _recommendation_categories()
        priority = assessment.risk_level if assessment.risk_level in PRIORITY_ORDER else RiskLevel.MEDIUM.value

        added = []
        for recommendation in assessment.recommendations:
            if recommendation in existing_titles:
                continue
            if recommendation in ESCALATION_RECOMMENDATIONS:
                category = RiskCategory.COMPLIANCE.value
            else:
                category = source_categories.get(recommendation, RiskCategory.DOCUMENTATION.value)
            added.append(
                self.add(
                    recommendation,
                    f'{recommendation} (recommended by the {assessment.risk_level} risk assessment).',
                    priority=priority,
                    category=category,
                    expected_risk_reduction=SEEDED_RISK_REDUCTION[priority],
                )
            )
            existing_titles.add(recommendation)

        logger.info('Seeded %s mitigation actions from assessment recommendations.', len(added))
        return added

    def to_dict(self) -> dict[str, Any]:
        serialized = []
        for action in self._actions:
            payload = asdict(action)
            payload['due_date'] = action.due_date.isoformat() if action.due_date else None
            serialized.append(payload)
        return {'sequence': self._sequence, 'actions': serialized}

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> MitigationPlanTracker:
        payload = payload or {}
        actions = []
        for item in payload.get('actions') or []:
            due_date = item.get('due_date')
            actions.append(
                MitigationAction(
                    **{
                        **item,
                        'due_date': date.fromisoformat(due_date) if due_date else None,
                        'resources_needed': list(item.get('resources_needed') or []),
                    }
                )
            )
        tracker = cls(actions)
        tracker._sequence = max(tracker._sequence, int(payload.get('sequence') or 0))
        return tracker


def default_plan() -> MitigationPlanTracker:
    tracker = MitigationPlanTracker()
    for template in DEFAULT_ACTIONS:
        tracker.add(**template)
    return tracker
