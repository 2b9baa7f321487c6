from tprisk.risk_engine.jurisdiction_rules.au import AustraliaJurisdictionRule
from tprisk.risk_engine.jurisdiction_rules.base import BaseJurisdictionRule, DefaultJurisdictionRule
from tprisk.risk_engine.jurisdiction_rules.de import GermanyJurisdictionRule
from tprisk.risk_engine.jurisdiction_rules.fr import FranceJurisdictionRule
from tprisk.risk_engine.jurisdiction_rules.uk import UnitedKingdomJurisdictionRule
from tprisk.risk_engine.jurisdiction_rules.us import UnitedStatesJurisdictionRule

JURISDICTION_RULES = {
    'US': UnitedStatesJurisdictionRule(),
    'DE': GermanyJurisdictionRule(),
    'UK': UnitedKingdomJurisdictionRule(),
    'AU': AustraliaJurisdictionRule(),
    'FR': FranceJurisdictionRule(),
}


def get_jurisdiction_rule(country_code: str) -> BaseJurisdictionRule:
    return JURISDICTION_RULES.get(country_code) or DefaultJurisdictionRule(country_code)
