from django.test import SimpleTestCase

from tprisk.risk_engine.categories import (
    CATEGORY_LABELS,
    CATEGORY_WEIGHTS,
    compliance_risk,
    documentation_risk,
    economic_risk,
    operational_risk,
    regulatory_risk,
    score_categories,
)
from tprisk.risk_engine.evaluator import evaluate_risk_factors, toggle_factor
from tprisk.risk_engine.types import Entity, Transaction


def documented_entity(entity_id, country_code):
    return Entity(
        id=entity_id,
        name=f'Entity {entity_id}',
        country_code=country_code,
        business_description='Distribution',
        functional_analysis={'functions': ['sales']},
        financial_data={'revenue': 1000},
    )


class CategoryHeuristicTests(SimpleTestCase):
    def test_documentation_risk_counts_gaps(self):
        bare_entity = Entity(id='e1', name='Bare', country_code='SG')
        bare_transaction = Transaction(id='t1')

        self.assertEqual(documentation_risk([bare_entity], []), 45)
        self.assertEqual(documentation_risk([], [bare_transaction]), 45)
        self.assertEqual(documentation_risk([bare_entity, bare_entity], [bare_transaction]), 100)
        self.assertEqual(documentation_risk([documented_entity('e2', 'SG')], []), 0)

    def test_compliance_risk(self):
        self.assertEqual(compliance_risk([documented_entity('1', 'SG')]), 0)
        self.assertEqual(compliance_risk([documented_entity('1', 'US'), documented_entity('2', 'DE')]), 35)
        four_countries = [
            documented_entity('1', 'US'),
            documented_entity('2', 'SG'),
            documented_entity('3', 'JP'),
            documented_entity('4', 'GB'),
        ]
        self.assertEqual(compliance_risk(four_countries), 50)

    def test_economic_risk_is_averaged_per_transaction(self):
        risky = Transaction(id='t1', amount=20_000_000, transaction_type='intangible_property')
        calm = Transaction(id='t2', amount=500, arm_length_range={'min': 1, 'max': 2})

        self.assertEqual(economic_risk([]), 0)
        self.assertEqual(economic_risk([risky]), 60)
        self.assertEqual(economic_risk([risky, calm]), 30)
        self.assertEqual(economic_risk([Transaction(id='t3', amount=2_000_000, transaction_type='financial_transactions')]), 45)

    def test_operational_risk(self):
        six = [documented_entity(str(index), 'SG') for index in range(6)]
        eleven = [documented_entity(str(index), 'SG') for index in range(11)]
        transactions = [Transaction(id=str(index)) for index in range(21)]

        self.assertEqual(operational_risk(six, []), 10)
        self.assertEqual(operational_risk(eleven, transactions), 35)
        self.assertEqual(operational_risk([], transactions[:11]), 8)

    def test_regulatory_risk(self):
        entities = [documented_entity('1', 'US'), documented_entity('2', 'CA'), documented_entity('3', 'LU')]

        self.assertEqual(regulatory_risk(entities), 30)

    def test_scores_stay_in_range(self):
        entities = [Entity(id=str(index), name='X', country_code='US') for index in range(20)]
        transactions = [Transaction(id=str(index), amount=50_000_000, transaction_type='intangible_property') for index in range(30)]

        for category in score_categories(entities, transactions):
            self.assertGreaterEqual(category.score, 0)
            self.assertLessEqual(category.score, 100)


class ScoreCategoriesTests(SimpleTestCase):
    def test_categories_in_fixed_order_with_weights(self):
        categories = score_categories([], [])

        self.assertEqual(
            [item.category for item in categories],
            ['documentation', 'compliance', 'economic', 'operational', 'regulatory'],
        )
        self.assertAlmostEqual(sum(item.weight for item in categories), 1.0)
        self.assertEqual([item.weight for item in categories], [CATEGORY_WEIGHTS[item.category] for item in categories])
        self.assertTrue(all(item.score == 0 for item in categories))

    def test_present_factor_titles_are_listed(self):
        factors = toggle_factor(evaluate_risk_factors([], []), 'reg_audit_history')
        regulatory = score_categories([], [], factors)[-1]

        self.assertEqual(regulatory.factors[:3], CATEGORY_LABELS['regulatory'])
        self.assertIn('Transfer Pricing Audit History', regulatory.factors)
