from __future__ import annotations

DEFAULT_BASE_RISK = 50


class BaseJurisdictionRule:
    country_code = ''
    name = ''
    base_risk = DEFAULT_BASE_RISK
    risk_factors: tuple[str, ...] = ()
    requirements: tuple[str, ...] = ()
    deadlines: tuple[str, ...] = ()
    local_recommendations: tuple[str, ...] = ()

    def display_name(self) -> str:
        return self.name or self.country_code

    def recommendations(self) -> list[str]:
        return list(self.local_recommendations)


class DefaultJurisdictionRule(BaseJurisdictionRule):
    def __init__(self, country_code: str):
        self.country_code = country_code
