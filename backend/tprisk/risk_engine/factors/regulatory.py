from tprisk.models import RiskCategory, Severity
from tprisk.risk_engine.country import normalize_country_code
from tprisk.risk_engine.factors.base import never_present, risk_factor

BEPS_EXPOSURE_JURISDICTIONS = frozenset({'LU', 'IE', 'NL', 'CH'})


def has_beps_exposure(context) -> bool:
    return any(
        normalize_country_code(entity.country_code) in BEPS_EXPOSURE_JURISDICTIONS
        for entity in context.entities
    )


REGULATORY_FACTORS = (
    risk_factor(
        id='reg_audit_history',
        category=RiskCategory.REGULATORY,
        title='Transfer Pricing Audit History',
        description='Previous transfer pricing audits or adjustments by tax authorities',
        severity=Severity.HIGH,
        impact=80,
        recommendations=[
            'Address previous audit findings',
            'Strengthen documentation in problematic areas',
            'Consider voluntary disclosure for similar issues',
        ],
        # Audit history is not part of the snapshot.
        predicate=never_present,
    ),
    risk_factor(
        id='reg_beps_exposure',
        category=RiskCategory.REGULATORY,
        title='BEPS Action Plan Exposure',
        description='Structures potentially affected by BEPS implementation measures',
        severity=Severity.MEDIUM,
        impact=65,
        recommendations=[
            'Review BEPS Action Plan impacts',
            'Assess substance requirements',
            'Consider proactive compliance measures',
        ],
        predicate=has_beps_exposure,
    ),
)
