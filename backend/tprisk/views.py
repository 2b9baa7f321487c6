import logging

from django.conf import settings
from django.http import Http404
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from tprisk.auth import ApiTokenPermission
from tprisk.models import Entity
from tprisk.risk_engine.engine import serialize_jurisdiction, serialize_overall
from tprisk.risk_engine.jurisdictions import model_jurisdictions
from tprisk.risk_engine.mitigation import ActionNotFound
from tprisk.risk_engine.statistics import compute_statistics, extract_observations, position_tested_price
from tprisk.serializers import (
    AssessmentRequestSerializer,
    MitigationActionCreateSerializer,
    MitigationActionUpdateSerializer,
    StatisticsRequestSerializer,
    benchmark_metric_label,
)
from tprisk.services import (
    build_assessment_response,
    build_plan_response,
    build_statistics_response,
    default_attribution,
    load_comparables,
    load_entities,
    load_mitigation_plan,
    load_transactions,
    persist_assessment,
    run_assessment,
    save_mitigation_plan,
    serialize_action,
)

logger = logging.getLogger(__name__)


def _ensure_entity_exists(entity_id) -> str | None:
    if entity_id is None:
        return None
    if not Entity.objects.filter(pk=entity_id).exists():
        raise Http404('Entity not found')
    return str(entity_id)


class HealthAPIView(APIView):
    throttle_scope = 'default'
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({'status': 'ok', 'timestamp': timezone.now(), 'version': settings.APP_VERSION})


class StatisticsAPIView(APIView):
    throttle_scope = 'statistics'
    authentication_classes = []
    permission_classes = [ApiTokenPermission]

    def post(self, request):
        serializer = StatisticsRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payload = serializer.validated_data
        metric = payload.get('metric')
        if 'observations' in payload:
            observations = payload['observations']
            comparable_count = None
        else:
            comparables = load_comparables(
                country=payload.get('country') or None,
                industry=payload.get('industry') or None,
                min_reliability=payload.get('min_reliability'),
            )
            observations = extract_observations(comparables, metric)
            comparable_count = len(comparables)

        result = compute_statistics(observations, metric=metric)
        response_payload = build_statistics_response(result, observations)
        response_payload['metric'] = metric
        response_payload['metric_label'] = benchmark_metric_label(metric)
        response_payload['comparable_count'] = comparable_count

        tested_price = payload.get('tested_price')
        if result is not None and tested_price is not None:
            response_payload['tested_price'] = position_tested_price(tested_price, result)

        return Response(response_payload, status=status.HTTP_200_OK)


class AssessmentAPIView(APIView):
    throttle_scope = 'assessment'
    authentication_classes = []
    permission_classes = [ApiTokenPermission]

    def post(self, request):
        serializer = AssessmentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payload = serializer.validated_data
        entity_id = _ensure_entity_exists(payload.get('entity_id'))
        result = run_assessment(
            entity_id=entity_id,
            overrides=payload.get('overrides') or {},
            attribution=payload.get('attribution'),
            clears=payload.get('clear') or [],
            toggles=payload.get('toggle') or [],
        )

        assessment = None
        if payload.get('persist'):
            assessment = persist_assessment(result, entity_id=entity_id)

        return Response(build_assessment_response(result, assessment), status=status.HTTP_200_OK)


class JurisdictionsAPIView(APIView):
    throttle_scope = 'assessment'
    authentication_classes = []
    permission_classes = [ApiTokenPermission]

    def get(self, request):
        attribution = (request.query_params.get('attribution') or '').strip() or default_attribution()
        jurisdictions = model_jurisdictions(load_entities(), load_transactions(), attribution=attribution)
        return Response(
            {'results': [serialize_jurisdiction(item) for item in jurisdictions]},
            status=status.HTTP_200_OK,
        )


class MitigationPlanAPIView(APIView):
    throttle_scope = 'plan'
    authentication_classes = []
    permission_classes = [ApiTokenPermission]

    def get(self, request):
        tracker = load_mitigation_plan(request.session)
        save_mitigation_plan(request.session, tracker)
        return Response(build_plan_response(tracker), status=status.HTTP_200_OK)

    def post(self, request):
        serializer = MitigationActionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tracker = load_mitigation_plan(request.session)
        data = serializer.validated_data
        try:
            action = tracker.add(
                data['title'],
                data['description'],
                priority=data['priority'],
                category=data['category'],
                estimated_effort=data['estimated_effort'],
                expected_risk_reduction=data['expected_risk_reduction'],
                resources_needed=data['resources_needed'],
                due_date=data['due_date'],
                assigned_to=data['assigned_to'] or None,
                cost_estimate=data['cost_estimate'] or None,
            )
        except ValueError as exc:
            return Response({'detail': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        save_mitigation_plan(request.session, tracker)
        return Response(
            {'action': serialize_action(action), 'summary': tracker.summary()},
            status=status.HTTP_201_CREATED,
        )


class MitigationActionAPIView(APIView):
    throttle_scope = 'plan'
    authentication_classes = []
    permission_classes = [ApiTokenPermission]

    def patch(self, request, action_id: str):
        serializer = MitigationActionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tracker = load_mitigation_plan(request.session)
        changes = serializer.validated_data
        try:
            action = tracker.get(action_id)
            # Status goes last so completed and pending pin progress to 100 and 0.
            if 'progress' in changes:
                action = tracker.update_progress(action_id, changes['progress'])
            if 'status' in changes:
                action = tracker.update_status(action_id, changes['status'])
            if 'due_date' in changes:
                action = tracker.set_due_date(action_id, changes['due_date'])
            if 'assigned_to' in changes:
                action = tracker.assign(action_id, changes['assigned_to'])
        except ActionNotFound as exc:
            raise Http404('Mitigation action not found') from exc
        except ValueError as exc:
            logger.warning('Rejected update for mitigation action %s: %s', action_id, exc)
            return Response({'detail': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        save_mitigation_plan(request.session, tracker)
        return Response(
            {'action': serialize_action(action), 'summary': tracker.summary()},
            status=status.HTTP_200_OK,
        )


class MitigationPlanSeedAPIView(APIView):
    throttle_scope = 'plan'
    authentication_classes = []
    permission_classes = [ApiTokenPermission]

    def post(self, request):
        serializer = AssessmentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payload = serializer.validated_data
        entity_id = _ensure_entity_exists(payload.get('entity_id'))
        result = run_assessment(
            entity_id=entity_id,
            overrides=payload.get('overrides') or {},
            attribution=payload.get('attribution'),
            clears=payload.get('clear') or [],
            toggles=payload.get('toggle') or [],
        )

        tracker = load_mitigation_plan(request.session)
        added = tracker.seed_from_recommendations(result.overall)
        save_mitigation_plan(request.session, tracker)

        response_payload = build_plan_response(tracker)
        response_payload['added'] = [serialize_action(action) for action in added]
        response_payload['overall'] = serialize_overall(result.overall)
        return Response(response_payload, status=status.HTTP_200_OK)
