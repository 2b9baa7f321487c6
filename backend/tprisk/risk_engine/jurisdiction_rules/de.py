from tprisk.risk_engine.jurisdiction_rules.base import BaseJurisdictionRule


class GermanyJurisdictionRule(BaseJurisdictionRule):
    country_code = 'DE'
    name = 'Germany'
    base_risk = 80
    risk_factors = (
        'Strict OECD implementation',
        'Business restructuring provisions',
        "Hypothetical arm's length test",
        'Secondary adjustment rules',
    )
    requirements = (
        'Master File and Local File',
        'Extraordinary business transactions documentation',
        'Transfer pricing documentation for €5M+ transactions',
        'Country-by-Country Reporting',
    )
    deadlines = (
        'Master File: 12 months after year-end',
        'Local File: 12 months after year-end',
        'Documentation: With tax return filing',
    )
    local_recommendations = (
        'Document extraordinary business transactions',
        "Prepare for hypothetical arm's length test",
    )
