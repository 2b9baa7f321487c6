from tprisk.risk_engine.jurisdiction_rules.base import BaseJurisdictionRule


class UnitedStatesJurisdictionRule(BaseJurisdictionRule):
    country_code = 'US'
    name = 'United States'
    base_risk = 85
    risk_factors = (
        'Aggressive transfer pricing enforcement',
        'Complex regulations (IRC 482)',
        'High penalty regime',
        'Extensive documentation requirements',
    )
    requirements = (
        'Form 8865 for foreign partnerships',
        'Form 5471 for foreign corporations',
        'Transfer pricing study documentation',
        'Country-by-Country Reporting',
    )
    deadlines = (
        'Income tax return: March 15 (corporations)',
        'CbCR filing: 12 months after year-end',
        'Form 5471: With income tax return',
    )
    local_recommendations = (
        'Ensure IRC 482 compliance',
        'Maintain detailed transfer pricing studies',
    )
