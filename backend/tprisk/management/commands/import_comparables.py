from __future__ import annotations

import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from tprisk.models import Comparable, Transaction
from tprisk.risk_engine.comparables import normalize_comparable_rows
from tprisk.risk_engine.financial import BENCHMARK_METRICS
from tprisk.risk_engine.statistics import benchmark_metric
from tprisk.services import looks_like_uuid


def _read_rows(path: Path) -> list[dict]:
    try:
        payload = json.loads(path.read_text(encoding='utf-8'))
    except FileNotFoundError as exc:
        raise CommandError(f'File not found: {path}') from exc
    except json.JSONDecodeError as exc:
        raise CommandError(f'Invalid JSON in {path}: {exc}') from exc

    if isinstance(payload, dict):
        payload = payload.get('rows')
    if not isinstance(payload, list):
        raise CommandError('Expected a list of comparable rows or an object with a "rows" list.')
    return [row for row in payload if isinstance(row, dict)]


class Command(BaseCommand):
    help = 'Import comparable companies from a JSON export of a benchmarking search.'

    def add_arguments(self, parser):
        parser.add_argument('path', type=str, help='JSON file holding a list of comparable rows.')
        parser.add_argument('--transaction', type=str, default='', help='Attach comparables to a transaction (by id).')
        parser.add_argument(
            '--metric',
            type=str,
            default='operating_margin',
            choices=sorted(BENCHMARK_METRICS),
            help='Metric to benchmark across the imported rows.',
        )
        parser.add_argument('--dry-run', action='store_true', help='Print rows that would be imported.')

    def handle(self, *args, **options):
        rows = _read_rows(Path(options['path']))
        transaction_id = (options['transaction'] or '').strip()
        metric = options['metric']
        dry_run = bool(options['dry_run'])

        linked_transaction = None
        if transaction_id:
            if looks_like_uuid(transaction_id):
                linked_transaction = Transaction.objects.filter(pk=transaction_id).first()
            if linked_transaction is None:
                raise CommandError(f'Transaction not found: {transaction_id}')

        comparables, skipped = normalize_comparable_rows(rows)
        for message in skipped:
            self.stdout.write(self.style.WARNING(f'Skipped {message}'))

        if not comparables:
            self.stdout.write(self.style.SUCCESS('No comparables to import.'))
            return

        for comparable in comparables:
            prefix = '[DRY RUN] Would import' if dry_run else 'Importing'
            self.stdout.write(
                f'{prefix}: {comparable.comparable_name} ({comparable.country}, reliability {comparable.reliability_score:.0f})'
            )

        result = benchmark_metric(comparables, metric)
        if result is None:
            self.stdout.write(f'No {metric} observations in this import.')
        else:
            self.stdout.write(
                f'{metric}: {result.count} observations, median {result.median:.2f}, '
                f'interquartile range {result.q1:.2f} to {result.q3:.2f}'
            )

        if dry_run:
            self.stdout.write(self.style.SUCCESS(f'Dry run complete. {len(comparables)} comparable(s) matched.'))
            return

        with transaction.atomic():
            for comparable in comparables:
                Comparable.objects.create(
                    transaction=linked_transaction,
                    comparable_name=comparable.comparable_name,
                    country=comparable.country,
                    industry=comparable.industry,
                    financial_data=comparable.financial_data.to_dict(),
                    reliability_score=comparable.reliability_score,
                )

        self.stdout.write(self.style.SUCCESS(f'Import complete. Stored {len(comparables)} comparable(s).'))
