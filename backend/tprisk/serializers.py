from rest_framework import serializers

from tprisk.models import ActionStatus, RiskCategory, RiskLevel
from tprisk.risk_engine.factors import DEFAULT_CATALOG
from tprisk.risk_engine.financial import BENCHMARK_METRICS, KNOWN_METRICS, as_number
from tprisk.risk_engine.jurisdictions import ATTRIBUTION_MODES

MAX_OBSERVATIONS = 10000


class StatisticsRequestSerializer(serializers.Serializer):
    observations = serializers.ListField(child=serializers.JSONField(), required=False, allow_empty=True)
    metric = serializers.ChoiceField(choices=KNOWN_METRICS, required=False)
    country = serializers.CharField(max_length=64, required=False, allow_blank=True)
    industry = serializers.CharField(max_length=128, required=False, allow_blank=True)
    min_reliability = serializers.FloatField(required=False, min_value=0, max_value=100)
    tested_price = serializers.FloatField(required=False)

    def validate_observations(self, value):
        if len(value) > MAX_OBSERVATIONS:
            raise serializers.ValidationError('Too many observations.')
        # Non-numeric entries are dropped, never zero-filled.
        return [number for number in (as_number(item) for item in value) if number is not None]

    def validate(self, attrs):
        if 'observations' not in attrs and not attrs.get('metric'):
            raise serializers.ValidationError('Provide either observations or a metric to benchmark.')
        return attrs


class AssessmentRequestSerializer(serializers.Serializer):
    entity_id = serializers.UUIDField(required=False, allow_null=True)
    overrides = serializers.DictField(child=serializers.BooleanField(), required=False, default=dict)
    persist = serializers.BooleanField(required=False, default=False)
    attribution = serializers.ChoiceField(choices=ATTRIBUTION_MODES, required=False)
    clear = serializers.ListField(child=serializers.CharField(max_length=64), required=False, default=list)
    toggle = serializers.ListField(child=serializers.CharField(max_length=64), required=False, default=list)

    def _known_factor_ids(self, value):
        unknown = sorted(set(value) - set(DEFAULT_CATALOG.ids()))
        if unknown:
            raise serializers.ValidationError(f'Unknown risk factor: {", ".join(unknown)}.')
        return value

    def validate_clear(self, value):
        return self._known_factor_ids(value)

    def validate_toggle(self, value):
        return self._known_factor_ids(value)


class MitigationActionCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    priority = serializers.ChoiceField(choices=RiskLevel.choices, required=False, default=RiskLevel.MEDIUM)
    category = serializers.ChoiceField(choices=RiskCategory.choices, required=False, default=RiskCategory.DOCUMENTATION)
    estimated_effort = serializers.CharField(max_length=64, required=False, allow_blank=True, default='')
    expected_risk_reduction = serializers.FloatField(required=False, min_value=0, max_value=100, default=0)
    resources_needed = serializers.ListField(child=serializers.CharField(max_length=255), required=False, default=list)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    assigned_to = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True, default=None)
    cost_estimate = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True, default=None)


class MitigationActionUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ActionStatus.choices, required=False)
    progress = serializers.FloatField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    assigned_to = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Provide at least one of status, progress, due_date or assigned_to.')
        return attrs


def benchmark_metric_label(metric: str | None) -> str | None:
    if not metric:
        return None
    return BENCHMARK_METRICS.get(metric, {}).get('label', metric)
