import json
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import CommandError, call_command
from django.test import TestCase

from tprisk.models import Comparable, Entity, RiskAssessment, Transaction


class AssessRiskCommandTests(TestCase):
    def setUp(self):
        self.entity = Entity.objects.create(name='Asia Pte Ltd', country_code='SG')
        Transaction.objects.create(entity=self.entity, transaction_type='services', amount=1000)

    def test_dry_run_does_not_store(self):
        output = StringIO()
        call_command('assess_risk', '--dry-run', stdout=output)
        rendered = output.getvalue()

        self.assertIn('Overall score:', rendered)
        self.assertIn('documentation:', rendered)
        self.assertIn('! Missing Transfer Pricing Studies (high)', rendered)
        self.assertIn('Dry run complete', rendered)
        self.assertEqual(RiskAssessment.objects.count(), 0)

    def test_assessment_is_stored_for_entity(self):
        output = StringIO()
        call_command('assess_risk', '--entity', str(self.entity.pk), stdout=output)

        assessment = RiskAssessment.objects.get()
        self.assertEqual(assessment.entity, self.entity)
        self.assertIn(str(assessment.pk), output.getvalue())

    def test_unknown_entity(self):
        with self.assertRaises(CommandError):
            call_command('assess_risk', '--entity', 'not-a-uuid', stdout=StringIO())


class ImportComparablesCommandTests(TestCase):
    rows = [
        {'company_name': 'Alpha GmbH', 'country': 'Germany', 'revenue': 1000, 'ebit': 100, 'total_assets': 2000},
        {'company_name': 'Beta Ltd', 'country': 'GB', 'sector': 'Wholesale', 'revenue': 500, 'ebit': 0},
        {'company_name': 'No Country Inc'},
    ]

    def setUp(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        self.path = Path(directory.name) / 'comparables.json'
        self.path.write_text(json.dumps(self.rows), encoding='utf-8')

    def test_dry_run_does_not_store(self):
        output = StringIO()
        call_command('import_comparables', str(self.path), '--dry-run', stdout=output)
        rendered = output.getvalue()

        self.assertIn('[DRY RUN] Would import: Alpha GmbH (DE', rendered)
        self.assertIn('Skipped Row 3', rendered)
        self.assertIn('operating_margin: 2 observations, median 5.00, interquartile range 0.00 to 10.00', rendered)
        self.assertEqual(Comparable.objects.count(), 0)

    def test_rows_are_normalized_and_stored(self):
        entity = Entity.objects.create(name='Distribution GmbH', country_code='DE')
        record = Transaction.objects.create(entity=entity, transaction_type='tangible_goods', amount=5000)
        output = StringIO()

        call_command('import_comparables', str(self.path), '--transaction', str(record.pk), stdout=output)

        stored = {item.comparable_name: item for item in Comparable.objects.all()}
        self.assertEqual(set(stored), {'Alpha GmbH', 'Beta Ltd'})
        self.assertEqual(stored['Alpha GmbH'].country, 'DE')
        self.assertEqual(stored['Alpha GmbH'].financial_data['operating_margin'], 10)
        self.assertEqual(stored['Alpha GmbH'].reliability_score, 95)
        self.assertEqual(stored['Beta Ltd'].reliability_score, 85)
        self.assertEqual(stored['Beta Ltd'].country, 'UK')
        self.assertEqual(stored['Beta Ltd'].industry, 'Wholesale')
        self.assertEqual(stored['Beta Ltd'].financial_data['operating_margin'], 0)
        self.assertEqual(stored['Beta Ltd'].transaction, record)
        self.assertIn('Stored 2 comparable(s)', output.getvalue())

    def test_invalid_input(self):
        broken = self.path.with_name('broken.json')
        broken.write_text('{"rows": 3}', encoding='utf-8')

        with self.assertRaises(CommandError):
            call_command('import_comparables', str(broken), stdout=StringIO())
        with self.assertRaises(CommandError):
            call_command('import_comparables', str(self.path.with_name('missing.json')), stdout=StringIO())
        with self.assertRaises(CommandError):
            call_command('import_comparables', str(self.path), '--transaction', 'not-a-uuid', stdout=StringIO())
