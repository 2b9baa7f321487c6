from tprisk.models import RiskCategory, Severity
from tprisk.risk_engine.country import normalize_country_code
from tprisk.risk_engine.factors.base import never_present, risk_factor

ENFORCEMENT_WATCHLIST = ('US', 'DE', 'AU', 'UK', 'FR')
MAX_WATCHLIST_JURISDICTIONS = 2

# USD proxy for the EUR 750M group revenue threshold.
CBCR_REVENUE_THRESHOLD = 500_000_000


def has_multiple_high_risk_jurisdictions(context) -> bool:
    countries = {normalize_country_code(entity.country_code) for entity in context.entities}
    matched = [code for code in ENFORCEMENT_WATCHLIST if code in countries]
    return len(matched) > MAX_WATCHLIST_JURISDICTIONS


def exceeds_cbcr_threshold(context) -> bool:
    total_revenue = 0.0
    for entity in context.entities:
        revenue = entity.financial_data.metric('revenue')
        if revenue is not None:
            total_revenue += revenue
    return total_revenue > CBCR_REVENUE_THRESHOLD


COMPLIANCE_FACTORS = (
    risk_factor(
        id='comp_missed_deadlines',
        category=RiskCategory.COMPLIANCE,
        title='Missed Filing Deadlines',
        description='History of late or missed transfer pricing documentation filings',
        severity=Severity.MEDIUM,
        impact=65,
        recommendations=[
            'Implement compliance calendar system',
            'Set up automated deadline reminders',
            'Assign dedicated compliance resources',
        ],
        # No filing history is tracked yet.
        predicate=never_present,
    ),
    risk_factor(
        id='comp_multiple_jurisdictions',
        category=RiskCategory.COMPLIANCE,
        title='Multiple High-Risk Jurisdictions',
        description='Operations in jurisdictions with aggressive transfer pricing enforcement',
        severity=Severity.HIGH,
        impact=75,
        recommendations=[
            'Monitor local TP regulations closely',
            'Consider advance pricing agreements (APAs)',
            'Maintain jurisdiction-specific documentation',
        ],
        predicate=has_multiple_high_risk_jurisdictions,
    ),
    risk_factor(
        id='comp_cbcr_thresholds',
        category=RiskCategory.COMPLIANCE,
        title='CbCR Threshold Exposure',
        description='Near or above Country-by-Country Reporting thresholds',
        severity=Severity.MEDIUM,
        impact=70,
        recommendations=[
            'Prepare for CbCR obligations',
            'Implement group reporting systems',
            'Review master file requirements',
        ],
        predicate=exceeds_cbcr_threshold,
    ),
)
