from __future__ import annotations

from datetime import date

from tprisk.models import DocumentationStatus, RiskCategory, Severity
from tprisk.risk_engine.factors.base import as_date, risk_factor

OUTDATED_AFTER_YEARS = 3


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year.
        return day.replace(year=day.year - years, day=28)


def has_pending_documentation(context) -> bool:
    return any(item.documentation_status == DocumentationStatus.PENDING for item in context.transactions)


def has_outdated_analysis(context) -> bool:
    cutoff = _years_before(context.today, OUTDATED_AFTER_YEARS)
    for assessment in context.assessments:
        assessed_on = as_date(assessment.assessment_date)
        if assessed_on is not None and assessed_on < cutoff:
            return True
    return False


def has_incomplete_benchmarking(context) -> bool:
    return any(not item.arm_length_range for item in context.transactions)


DOCUMENTATION_FACTORS = (
    risk_factor(
        id='doc_missing_studies',
        category=RiskCategory.DOCUMENTATION,
        title='Missing Transfer Pricing Studies',
        description='Lack of comprehensive transfer pricing documentation for controlled transactions',
        severity=Severity.HIGH,
        impact=85,
        recommendations=[
            'Prepare comprehensive transfer pricing studies',
            'Document functional analysis and risk allocation',
            'Maintain contemporaneous documentation',
        ],
        predicate=has_pending_documentation,
    ),
    risk_factor(
        id='doc_outdated_analysis',
        category=RiskCategory.DOCUMENTATION,
        title='Outdated Economic Analysis',
        description='Transfer pricing analysis not updated within the last 3 years',
        severity=Severity.MEDIUM,
        impact=60,
        recommendations=[
            'Update benchmarking studies with recent data',
            'Review and refresh functional analysis',
            "Validate current arm's length range",
        ],
        predicate=has_outdated_analysis,
    ),
    risk_factor(
        id='doc_incomplete_benchmarking',
        category=RiskCategory.DOCUMENTATION,
        title='Incomplete Benchmarking',
        description='Insufficient comparable companies or weak benchmarking methodology',
        severity=Severity.HIGH,
        impact=75,
        recommendations=[
            'Expand comparable company search',
            'Strengthen search and selection criteria',
            'Perform statistical validation of results',
        ],
        predicate=has_incomplete_benchmarking,
    ),
)
