from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from tprisk.models import Entity
from tprisk.risk_engine.evaluator import present_factors
from tprisk.services import looks_like_uuid, persist_assessment, run_assessment


class Command(BaseCommand):
    help = 'Run the transfer pricing risk engine and store the assessment.'

    def add_arguments(self, parser):
        parser.add_argument('--entity', type=str, default='', help='Only assess one entity (by id).')
        parser.add_argument('--dry-run', action='store_true', help='Print the assessment without storing it.')

    def handle(self, *args, **options):
        entity_id = (options['entity'] or '').strip() or None
        dry_run = bool(options['dry_run'])

        if entity_id is not None:
            entity = Entity.objects.filter(pk=entity_id).first() if looks_like_uuid(entity_id) else None
            if entity is None:
                raise CommandError(f'Entity not found: {entity_id}')
            entity_id = str(entity.pk)

        result = run_assessment(entity_id=entity_id)
        overall = result.overall

        self.stdout.write(f'Overall score: {overall.overall_score:.1f} ({overall.risk_level})')
        for category in result.categories:
            self.stdout.write(f'  {category.category}: {category.score:.1f}')
        for factor in present_factors(result.factors):
            self.stdout.write(f'  ! {factor.definition.title} ({factor.definition.severity})')
        for recommendation in overall.recommendations:
            self.stdout.write(f'  - {recommendation}')

        if dry_run:
            self.stdout.write(self.style.SUCCESS('Dry run complete. Assessment not stored.'))
            return

        assessment = persist_assessment(result, entity_id=entity_id)
        self.stdout.write(self.style.SUCCESS(f'Assessment stored: {assessment.pk}'))
