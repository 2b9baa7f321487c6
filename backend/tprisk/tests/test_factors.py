from datetime import date, datetime, timezone

from django.test import SimpleTestCase

from tprisk.risk_engine.evaluator import (
    clear_override,
    collect_overrides,
    evaluate_risk_factors,
    factor_risk_score,
    factors_by_category,
    present_factors,
    toggle_factor,
)
from tprisk.risk_engine.factors import DEFAULT_CATALOG, RiskFactorCatalog, risk_factor
from tprisk.risk_engine.types import Entity, PriorAssessment, Transaction

TODAY = date(2024, 6, 1)


def present_ids(instances):
    return {item.id for item in instances if item.present}


class RiskFactorCatalogTests(SimpleTestCase):
    def test_default_catalog_has_thirteen_unique_factors(self):
        self.assertEqual(len(DEFAULT_CATALOG), 13)
        self.assertEqual(len(set(DEFAULT_CATALOG.ids())), 13)
        self.assertEqual(DEFAULT_CATALOG.version, 1)
        self.assertEqual(DEFAULT_CATALOG.get('econ_high_profit_margins').impact, 90)
        self.assertIsNone(DEFAULT_CATALOG.get('missing'))

    def test_duplicate_ids_rejected(self):
        definition = risk_factor(
            id='dup',
            category='documentation',
            title='Duplicate',
            description='Duplicate factor',
            severity='low',
            impact=150,
            recommendations=[],
            predicate=lambda context: True,
        )
        self.assertEqual(definition.impact, 100)
        with self.assertRaises(ValueError):
            RiskFactorCatalog(version=2, definitions=(definition, definition))


class EvaluateRiskFactorsTests(SimpleTestCase):
    def test_empty_snapshot_has_no_present_factors(self):
        instances = evaluate_risk_factors([], [], today=TODAY)

        self.assertEqual([item.id for item in instances], DEFAULT_CATALOG.ids())
        self.assertEqual(present_ids(instances), set())
        self.assertEqual(factor_risk_score(instances), 0)

    def test_pending_transaction_without_range(self):
        transactions = [Transaction(id='t1', amount=1000, documentation_status='pending')]
        instances = evaluate_risk_factors([], transactions, today=TODAY)

        self.assertEqual(present_ids(instances), {'doc_missing_studies', 'doc_incomplete_benchmarking'})
        self.assertAlmostEqual(factor_risk_score(instances), (85 + 75) / 13)

    def test_complete_transaction_with_range(self):
        transactions = [
            Transaction(
                id='t1',
                documentation_status='complete',
                arm_length_range={'min': 5, 'max': 9},
            ),
        ]
        instances = evaluate_risk_factors([], transactions, today=TODAY)

        self.assertEqual(present_ids(instances), set())

    def test_outdated_analysis_uses_three_year_cutoff(self):
        old = PriorAssessment(id='a1', assessment_date=datetime(2021, 5, 31, tzinfo=timezone.utc))
        recent = PriorAssessment(id='a2', assessment_date=date(2021, 6, 1))

        self.assertIn('doc_outdated_analysis', present_ids(evaluate_risk_factors([], [], [old], today=TODAY)))
        self.assertNotIn('doc_outdated_analysis', present_ids(evaluate_risk_factors([], [], [recent], today=TODAY)))

    def test_economic_factors(self):
        entities = [
            Entity(id='e1', name='HighCo', country_code='SG', financial_data={'operating_margin': '35'}),
            Entity(id='e2', name='LossCo', country_code='SG', financial_data={'net_profit': -10}),
        ]
        transactions = [
            Transaction(
                id='t1',
                transaction_type='intangible_property',
                documentation_status='complete',
                arm_length_range={'min': 1},
            ),
        ]
        instances = evaluate_risk_factors(entities, transactions, today=TODAY)

        self.assertEqual(
            present_ids(instances),
            {'econ_high_profit_margins', 'econ_loss_making_entities', 'econ_intangible_complexity'},
        )

    def test_malformed_financial_values_are_ignored(self):
        entities = [Entity(id='e1', name='Odd', country_code='SG', financial_data={'operating_margin': 'n/a'})]

        self.assertNotIn('econ_high_profit_margins', present_ids(evaluate_risk_factors(entities, [], today=TODAY)))

    def test_high_risk_jurisdictions_need_more_than_two(self):
        two = [Entity(id='1', name='A', country_code='US'), Entity(id='2', name='B', country_code='DE')]
        three = two + [Entity(id='3', name='C', country_code='France')]

        self.assertNotIn('comp_multiple_jurisdictions', present_ids(evaluate_risk_factors(two, [], today=TODAY)))
        self.assertIn('comp_multiple_jurisdictions', present_ids(evaluate_risk_factors(three, [], today=TODAY)))

    def test_cbcr_threshold_uses_group_revenue(self):
        entities = [
            Entity(id='1', name='A', country_code='SG', financial_data={'revenue': 300_000_000}),
            Entity(id='2', name='B', country_code='SG', financial_data={'revenue': 250_000_000}),
        ]

        self.assertIn('comp_cbcr_thresholds', present_ids(evaluate_risk_factors(entities, [], today=TODAY)))
        self.assertNotIn('comp_cbcr_thresholds', present_ids(evaluate_risk_factors(entities[:1], [], today=TODAY)))

    def test_structure_and_beps_factors(self):
        entities = [Entity(id=str(index), name=f'E{index}', country_code='SG') for index in range(10)]
        entities.append(Entity(id='lux', name='HoldCo', country_code='lu'))
        instances = evaluate_risk_factors(entities, [], today=TODAY)

        self.assertEqual(present_ids(instances), {'op_complex_structure', 'reg_beps_exposure'})


class FactorOverrideTests(SimpleTestCase):
    def test_override_beats_computed_value(self):
        instances = evaluate_risk_factors([], [], overrides={'comp_missed_deadlines': True}, today=TODAY)
        factor = next(item for item in instances if item.id == 'comp_missed_deadlines')

        self.assertFalse(factor.computed)
        self.assertTrue(factor.present)
        self.assertTrue(factor.overridden)
        self.assertAlmostEqual(factor_risk_score(instances), 65 / 13)

    def test_toggle_and_clear_override(self):
        instances = evaluate_risk_factors([], [], today=TODAY)

        toggled = toggle_factor(instances, 'reg_audit_history')
        self.assertEqual(present_ids(toggled), {'reg_audit_history'})
        self.assertEqual(collect_overrides(toggled), {'reg_audit_history': True})

        toggled_back = toggle_factor(toggled, 'reg_audit_history')
        self.assertEqual(present_ids(toggled_back), set())
        self.assertEqual(collect_overrides(toggled_back), {'reg_audit_history': False})

        cleared = clear_override(toggled_back, 'reg_audit_history')
        self.assertEqual(collect_overrides(cleared), {})

    def test_overrides_are_not_kept_between_evaluations(self):
        toggled = toggle_factor(evaluate_risk_factors([], [], today=TODAY), 'op_frequent_restructuring')
        fresh = evaluate_risk_factors([], [], today=TODAY)
        carried = evaluate_risk_factors([], [], overrides=collect_overrides(toggled), today=TODAY)

        self.assertEqual(present_ids(fresh), set())
        self.assertEqual(present_ids(carried), {'op_frequent_restructuring'})

    def test_grouping_by_category(self):
        instances = toggle_factor(evaluate_risk_factors([], [], today=TODAY), 'doc_outdated_analysis')
        grouped = factors_by_category(instances)

        self.assertEqual(grouped['documentation']['total'], 3)
        self.assertEqual(grouped['documentation']['present'], 1)
        self.assertEqual(grouped['regulatory']['present'], 0)
        self.assertEqual([item.id for item in present_factors(instances)], ['doc_outdated_analysis'])
