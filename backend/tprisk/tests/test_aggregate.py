from django.test import SimpleTestCase

from tprisk.risk_engine.aggregate import (
    CATEGORY_RECOMMENDATIONS,
    ESCALATION_RECOMMENDATIONS,
    aggregate_overall_risk,
    risk_level_for_score,
)
from tprisk.risk_engine.categories import CATEGORY_WEIGHTS
from tprisk.risk_engine.types import CategoryScore


def categories_with(scores):
    return [
        CategoryScore(category=category, score=scores.get(category, 0), weight=weight)
        for category, weight in CATEGORY_WEIGHTS.items()
    ]


class RiskLevelTests(SimpleTestCase):
    def test_threshold_boundaries(self):
        self.assertEqual(risk_level_for_score(80), 'critical')
        self.assertEqual(risk_level_for_score(79.99), 'high')
        self.assertEqual(risk_level_for_score(60), 'high')
        self.assertEqual(risk_level_for_score(59.9), 'medium')
        self.assertEqual(risk_level_for_score(40), 'medium')
        self.assertEqual(risk_level_for_score(39.9), 'low')
        self.assertEqual(risk_level_for_score(0), 'low')


class AggregateOverallRiskTests(SimpleTestCase):
    def test_all_zero_scores(self):
        overall = aggregate_overall_risk(categories_with({}))

        self.assertEqual(overall.overall_score, 0)
        self.assertEqual(overall.risk_level, 'low')
        self.assertEqual(overall.recommendations, ())

    def test_all_maximum_scores(self):
        overall = aggregate_overall_risk(categories_with({category: 100 for category in CATEGORY_WEIGHTS}))

        self.assertEqual(overall.overall_score, 100)
        self.assertEqual(overall.risk_level, 'critical')
        self.assertEqual(len(overall.recommendations), 12)
        self.assertEqual(overall.recommendations[-2:], ESCALATION_RECOMMENDATIONS)

    def test_weighted_sum(self):
        overall = aggregate_overall_risk(categories_with({'documentation': 80, 'economic': 50}))

        self.assertAlmostEqual(overall.overall_score, 80 * 0.25 + 50 * 0.30)
        self.assertEqual(overall.risk_level, 'low')
        self.assertEqual(list(overall.recommendations), list(CATEGORY_RECOMMENDATIONS['documentation']))

    def test_category_at_trigger_does_not_recommend(self):
        overall = aggregate_overall_risk(categories_with({'compliance': 60}))

        self.assertEqual(overall.recommendations, ())

    def test_escalation_only_for_high_and_critical(self):
        high = aggregate_overall_risk(categories_with({category: 65 for category in CATEGORY_WEIGHTS}))

        self.assertEqual(high.risk_level, 'high')
        self.assertEqual(high.recommendations[-2:], ESCALATION_RECOMMENDATIONS)
        self.assertEqual(len(high.recommendations), 12)

    def test_category_names_are_case_insensitive(self):
        overall = aggregate_overall_risk([CategoryScore(category='Regulatory', score=90, weight=0.1)])

        self.assertEqual(list(overall.recommendations), list(CATEGORY_RECOMMENDATIONS['regulatory']))
