from tprisk.risk_engine.jurisdiction_rules.base import BaseJurisdictionRule


class UnitedKingdomJurisdictionRule(BaseJurisdictionRule):
    country_code = 'UK'
    name = 'United Kingdom'
    base_risk = 75
    risk_factors = (
        'Diverted profits tax',
        'OECD BEPS implementation',
        'Thin capitalization rules',
        'Transfer pricing penalty regime',
    )
    requirements = (
        'Master File and Local File',
        'Transfer pricing return',
        'Country-by-Country Reporting',
        'Advance pricing agreement option',
    )
    deadlines = (
        'Corporation tax return: 12 months after year-end',
        'CbCR filing: 12 months after year-end',
        'Master File: On request',
    )
    local_recommendations = (
        'Assess diverted profits tax exposure',
        'Consider UK transfer pricing exemptions',
    )
