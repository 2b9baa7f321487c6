from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from tprisk.risk_engine.country import normalize_country_code
from tprisk.risk_engine.financial import as_number
from tprisk.risk_engine.types import Comparable

FIELD_ALIASES = {
    'name': ('company_name', 'name', 'entity_name', 'comparable_name'),
    'country': ('country', 'jurisdiction', 'country_code'),
    'industry': ('industry', 'sector', 'business_type'),
}

METRIC_ALIASES = {
    'revenue': ('revenue', 'sales', 'turnover', 'total_revenue'),
    'operating_profit': ('operating_profit', 'ebit', 'operating_income'),
    'net_profit': ('net_profit', 'net_income', 'profit_after_tax'),
    'total_assets': ('total_assets', 'assets', 'total_asset'),
    'operating_margin': ('operating_margin', 'ebit_margin', 'operating_margin_%'),
    'gross_margin': ('gross_margin', 'gross_margin_%'),
    'roa': ('roa', 'return_on_assets'),
    'ros': ('ros', 'return_on_sales'),
    'berry_ratio': ('berry_ratio',),
}

ESSENTIAL_FIELDS = ('revenue', 'operating_profit', 'total_assets')
DESIRABLE_FIELDS = ('net_profit', 'operating_margin', 'roa')
BASE_RELIABILITY = 50
MAX_RELIABILITY = 95


def _find_field(row: Mapping[str, Any], names: Iterable[str]) -> Any:
    lowered = {str(key).lower(): value for key, value in row.items()}
    for name in names:
        value = row.get(name)
        if value is None or value == '':
            value = lowered.get(name.lower())
        if value is not None and value != '':
            return value
    return None


def derive_metrics(financial_data: dict[str, float]) -> dict[str, float]:
    derived = dict(financial_data)
    operating_profit = derived.get('operating_profit')
    revenue = derived.get('revenue')
    if operating_profit is not None and revenue:
        derived['operating_margin'] = operating_profit / revenue * 100

    net_profit = derived.get('net_profit')
    total_assets = derived.get('total_assets')
    if net_profit is not None and total_assets:
        derived['roa'] = net_profit / total_assets * 100
    return derived


def reliability_score(financial_data: Mapping[str, Any]) -> float:
    score = BASE_RELIABILITY
    for name in ESSENTIAL_FIELDS:
        if name in financial_data:
            score += 15
    for name in DESIRABLE_FIELDS:
        if name in financial_data:
            score += 5
    return float(min(score, MAX_RELIABILITY))


def normalize_comparable_row(row: Mapping[str, Any], row_id: str = '') -> Comparable | None:
    name = _find_field(row, FIELD_ALIASES['name'])
    country = _find_field(row, FIELD_ALIASES['country'])
    if not name or not country:
        return None

    financial_data = {}
    for metric, aliases in METRIC_ALIASES.items():
        value = as_number(_find_field(row, aliases))
        if value is not None:
            financial_data[metric] = value
    financial_data = derive_metrics(financial_data)

    industry = _find_field(row, FIELD_ALIASES['industry'])
    return Comparable(
        id=row_id,
        comparable_name=str(name).strip(),
        country=normalize_country_code(str(country)),
        industry=str(industry).strip() if industry else 'Not specified',
        reliability_score=reliability_score(financial_data),
        financial_data=financial_data,
    )


def normalize_comparable_rows(rows: Iterable[Mapping[str, Any]]) -> tuple[list[Comparable], list[str]]:
    comparables = []
    skipped = []
    for index, row in enumerate(rows, start=1):
        comparable = normalize_comparable_row(row, row_id=f'row_{index}')
        if comparable is None:
            skipped.append(f'Row {index}: missing comparable name or country.')
            continue
        comparables.append(comparable)
    return comparables, skipped


def filter_comparables(
    comparables: Iterable[Comparable],
    country: str | None = None,
    industry: str | None = None,
    min_reliability: float | None = None,
) -> list[Comparable]:
    country_code = normalize_country_code(country) if country else None
    industry_name = industry.strip().lower() if industry else None

    selected = []
    for comparable in comparables:
        if country_code and normalize_country_code(comparable.country) != country_code:
            continue
        if industry_name and (comparable.industry or '').strip().lower() != industry_name:
            continue
        if min_reliability is not None and comparable.reliability_score < min_reliability:
            continue
        selected.append(comparable)
    return selected
