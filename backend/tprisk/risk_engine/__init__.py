from tprisk.risk_engine.aggregate import aggregate_overall_risk
from tprisk.risk_engine.categories import score_categories
from tprisk.risk_engine.evaluator import evaluate_risk_factors
from tprisk.risk_engine.jurisdictions import model_jurisdictions
from tprisk.risk_engine.mitigation import MitigationPlanTracker
from tprisk.risk_engine.statistics import compute_statistics

__all__ = [
    'MitigationPlanTracker',
    'aggregate_overall_risk',
    'compute_statistics',
    'evaluate_risk_factors',
    'model_jurisdictions',
    'score_categories',
]
