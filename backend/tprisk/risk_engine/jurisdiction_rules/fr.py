from tprisk.risk_engine.jurisdiction_rules.base import BaseJurisdictionRule


class FranceJurisdictionRule(BaseJurisdictionRule):
    country_code = 'FR'
    name = 'France'
    base_risk = 72
    risk_factors = (
        'Comprehensive transfer pricing rules',
        'Documentation obligations',
        'Secondary adjustment provisions',
        'Withholding tax on management fees',
    )
    requirements = (
        'Master File and Local File',
        'Transfer pricing documentation',
        'Country-by-Country Reporting',
        'Annual summary table',
    )
    deadlines = (
        'Corporate income tax: 3 months + 2 days after year-end',
        'Master File: On request',
        'Local File: On request',
    )
    local_recommendations = (
        'Prepare annual summary table',
        'Review withholding tax obligations',
    )
