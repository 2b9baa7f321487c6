from tprisk.risk_engine.factors.base import RiskFactorCatalog, risk_factor
from tprisk.risk_engine.factors.compliance import COMPLIANCE_FACTORS
from tprisk.risk_engine.factors.documentation import DOCUMENTATION_FACTORS
from tprisk.risk_engine.factors.economic import ECONOMIC_FACTORS
from tprisk.risk_engine.factors.operational import OPERATIONAL_FACTORS
from tprisk.risk_engine.factors.regulatory import REGULATORY_FACTORS

CATALOG_VERSION = 1

DEFAULT_CATALOG = RiskFactorCatalog(
    version=CATALOG_VERSION,
    definitions=(
        *DOCUMENTATION_FACTORS,
        *ECONOMIC_FACTORS,
        *COMPLIANCE_FACTORS,
        *OPERATIONAL_FACTORS,
        *REGULATORY_FACTORS,
    ),
)

__all__ = ['CATALOG_VERSION', 'DEFAULT_CATALOG', 'RiskFactorCatalog', 'risk_factor']
