from django.test import SimpleTestCase

from tprisk.risk_engine.jurisdictions import ENTITY_ATTRIBUTION, model_jurisdictions
from tprisk.risk_engine.types import Entity, Transaction

LEVEL_EXPERT = 'Consider engaging local transfer pricing expert'
LEVEL_MONITOR = 'Monitor local regulatory developments closely'


def by_code(jurisdictions):
    return {item.country_code: item for item in jurisdictions}


class JurisdictionRiskModelTests(SimpleTestCase):
    def test_no_entities_no_jurisdictions(self):
        self.assertEqual(model_jurisdictions([], [Transaction(id='t1', amount=10)]), [])

    def test_known_jurisdiction_profile(self):
        [us] = model_jurisdictions([Entity(id='e1', name='US Inc', country_code='US')], [])

        self.assertEqual(us.country_name, 'United States')
        self.assertEqual(us.risk_score, 85)
        self.assertEqual(us.risk_level, 'critical')
        self.assertEqual(us.entity_count, 1)
        self.assertEqual(us.transaction_value, 0)
        self.assertIn('Form 5471 for foreign corporations', us.compliance_requirements)
        self.assertEqual(
            us.recommendations,
            [
                LEVEL_EXPERT,
                'Implement comprehensive documentation strategy',
                LEVEL_MONITOR,
                'Consider advance pricing agreement (APA)',
                'Ensure IRC 482 compliance',
                'Maintain detailed transfer pricing studies',
            ],
        )

    def test_unknown_jurisdiction_uses_defaults(self):
        [profile] = model_jurisdictions([Entity(id='e1', name='Brasil Ltda', country_code='br')], [])

        self.assertEqual(profile.country_code, 'BR')
        self.assertEqual(profile.country_name, 'BR')
        self.assertEqual(profile.risk_score, 50)
        self.assertEqual(profile.risk_level, 'medium')
        self.assertEqual(profile.compliance_requirements, [])
        self.assertEqual(profile.recommendations, [])

    def test_country_aliases_merge(self):
        entities = [
            Entity(id='e1', name='UK One', country_code='GB'),
            Entity(id='e2', name='UK Two', country_code='United Kingdom'),
        ]
        [uk] = model_jurisdictions(entities, [])

        self.assertEqual(uk.country_code, 'UK')
        self.assertEqual(uk.entity_count, 2)
        self.assertEqual(uk.risk_level, 'high')
        self.assertIn(LEVEL_MONITOR, uk.recommendations)
        self.assertNotIn(LEVEL_EXPERT, uk.recommendations)

    def test_entity_adjustments_apply_once_per_jurisdiction(self):
        entities = [
            Entity(id='e1', name='Big', country_code='SG', entity_type='parent', financial_data={'revenue': 200_000_000}),
            Entity(id='e2', name='Bigger', country_code='SG', entity_type='parent', financial_data={'revenue': 300_000_000}),
        ]
        [sg] = model_jurisdictions(entities, [])

        self.assertEqual(sg.risk_score, 65)
        self.assertEqual(sg.risk_level, 'high')

    def test_large_us_parent_reaches_critical(self):
        entity = Entity(
            id='e1',
            name='US Holdings Inc',
            country_code='US',
            entity_type='parent',
            financial_data={'revenue': 150_000_000},
        )
        [us] = model_jurisdictions([entity], [])

        self.assertEqual(us.risk_score, 100)
        self.assertEqual(us.risk_level, 'critical')
        self.assertIn(LEVEL_EXPERT, us.recommendations)

    def test_even_split_attribution(self):
        entities = [
            Entity(id='us', name='US Inc', country_code='US'),
            Entity(id='de', name='DE GmbH', country_code='DE'),
        ]
        transactions = [
            Transaction(id='t1', amount=20_000_000, transaction_type='intangible_property', entity_id='de'),
        ]
        result = model_jurisdictions(entities, transactions)
        profiles = by_code(result)

        self.assertEqual([item.country_code for item in result], ['US', 'DE'])
        self.assertEqual(profiles['US'].transaction_value, 10_000_000)
        self.assertEqual(profiles['DE'].transaction_value, 10_000_000)
        self.assertEqual(profiles['US'].risk_score, 93)
        self.assertEqual(profiles['DE'].risk_score, 88)

    def test_entity_attribution(self):
        entities = [
            Entity(id='us', name='US Inc', country_code='US'),
            Entity(id='de', name='DE GmbH', country_code='DE'),
        ]
        transactions = [
            Transaction(id='t1', amount=20_000_000, transaction_type='intangible_property', entity_id='de'),
            Transaction(id='t2', amount=1_000, entity_id=None),
        ]
        profiles = by_code(model_jurisdictions(entities, transactions, attribution=ENTITY_ATTRIBUTION))

        self.assertEqual(profiles['DE'].transaction_value, 20_000_000 + 500)
        self.assertEqual(profiles['US'].transaction_value, 500)
        self.assertEqual(profiles['DE'].risk_score, 88)
        self.assertEqual(profiles['US'].risk_score, 85)

    def test_unknown_attribution_falls_back_to_even_split(self):
        entities = [Entity(id='a', name='A', country_code='FR'), Entity(id='b', name='B', country_code='AU')]
        transactions = [Transaction(id='t1', amount=100, entity_id='a')]

        with self.assertLogs('tprisk.risk_engine.jurisdictions', level='WARNING'):
            profiles = by_code(model_jurisdictions(entities, transactions, attribution='nonsense'))

        self.assertEqual(profiles['FR'].transaction_value, 50)
        self.assertEqual(profiles['AU'].transaction_value, 50)

    def test_sorted_by_score_descending(self):
        entities = [
            Entity(id='1', name='FR', country_code='FR'),
            Entity(id='2', name='US', country_code='US'),
            Entity(id='3', name='NZ', country_code='NZ'),
            Entity(id='4', name='AU', country_code='AU'),
        ]
        scores = [item.risk_score for item in model_jurisdictions(entities, [])]

        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(scores, [85, 78, 72, 50])
