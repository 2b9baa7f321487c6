from tprisk.models import RiskCategory, Severity
from tprisk.risk_engine.factors.base import never_present, risk_factor

COMPLEX_STRUCTURE_ENTITY_COUNT = 10


def has_complex_structure(context) -> bool:
    return len(context.entities) > COMPLEX_STRUCTURE_ENTITY_COUNT


OPERATIONAL_FACTORS = (
    risk_factor(
        id='op_complex_structure',
        category=RiskCategory.OPERATIONAL,
        title='Complex Corporate Structure',
        description='Multiple intermediary holding companies or complex ownership structures',
        severity=Severity.MEDIUM,
        impact=55,
        recommendations=[
            'Simplify corporate structure where possible',
            'Document business rationale for structure',
            'Ensure substance in key jurisdictions',
        ],
        predicate=has_complex_structure,
    ),
    risk_factor(
        id='op_frequent_restructuring',
        category=RiskCategory.OPERATIONAL,
        title='Frequent Business Restructuring',
        description='Regular changes in business operations, functions, or ownership',
        severity=Severity.MEDIUM,
        impact=60,
        recommendations=[
            'Document business reasons for restructuring',
            'Perform step-by-step analysis',
            "Maintain arm's length compensation for transfers",
        ],
        # Requires restructuring history, which is not captured.
        predicate=never_present,
    ),
)
