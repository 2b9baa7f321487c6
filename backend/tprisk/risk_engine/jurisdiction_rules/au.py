from tprisk.risk_engine.jurisdiction_rules.base import BaseJurisdictionRule


class AustraliaJurisdictionRule(BaseJurisdictionRule):
    country_code = 'AU'
    name = 'Australia'
    base_risk = 78
    risk_factors = (
        'Multinational anti-avoidance law',
        'Transfer pricing benefit test',
        'Reconstruction approach',
        'Administrative penalties',
    )
    requirements = (
        'Master File and Local File',
        'Local File for A$25M+ transactions',
        'Country-by-Country Reporting',
        'Transfer pricing records',
    )
    deadlines = (
        'Income tax return: April 30 or May 15',
        'CbCR filing: 12 months after year-end',
        'Local File: With tax return',
    )
    local_recommendations = (
        'Ensure MAAL compliance',
        'Document reconstruction approach',
    )
