from tprisk.models import RiskCategory, Severity, TransactionType
from tprisk.risk_engine.factors.base import risk_factor

HIGH_OPERATING_MARGIN = 30


def has_high_profit_margins(context) -> bool:
    for entity in context.entities:
        margin = entity.financial_data.metric('operating_margin')
        if margin is not None and margin > HIGH_OPERATING_MARGIN:
            return True
    return False


def has_loss_making_entities(context) -> bool:
    for entity in context.entities:
        net_profit = entity.financial_data.metric('net_profit')
        if net_profit is not None and net_profit < 0:
            return True
    return False


def has_intangible_transactions(context) -> bool:
    return any(item.transaction_type == TransactionType.INTANGIBLE_PROPERTY for item in context.transactions)


ECONOMIC_FACTORS = (
    risk_factor(
        id='econ_high_profit_margins',
        category=RiskCategory.ECONOMIC,
        title='Unusually High Profit Margins',
        description="Profit margins significantly above arm's length range",
        severity=Severity.CRITICAL,
        impact=90,
        recommendations=[
            'Review pricing policies immediately',
            'Perform detailed comparability analysis',
            'Consider primary adjustment calculations',
        ],
        predicate=has_high_profit_margins,
    ),
    risk_factor(
        id='econ_loss_making_entities',
        category=RiskCategory.ECONOMIC,
        title='Persistent Loss-Making Entities',
        description='Related entities showing consistent losses without business rationale',
        severity=Severity.HIGH,
        impact=80,
        recommendations=[
            'Analyze business rationale for losses',
            'Review cost allocation methodologies',
            'Consider restructuring transactions',
        ],
        predicate=has_loss_making_entities,
    ),
    risk_factor(
        id='econ_intangible_complexity',
        category=RiskCategory.ECONOMIC,
        title='Complex Intangible Arrangements',
        description='Significant intangible property transactions without proper DEMPE analysis',
        severity=Severity.HIGH,
        impact=85,
        recommendations=[
            'Perform DEMPE (Development, Enhancement, Maintenance, Protection, Exploitation) analysis',
            'Document value creation activities',
            'Align pricing with value creation',
        ],
        predicate=has_intangible_transactions,
    ),
)
