from __future__ import annotations

COUNTRY_ALIASES = {
    'UNITED STATES': 'US',
    'UNITED STATES OF AMERICA': 'US',
    'USA': 'US',
    'GERMANY': 'DE',
    'DEUTSCHLAND': 'DE',
    'UNITED KINGDOM': 'UK',
    'GREAT BRITAIN': 'UK',
    'GB': 'UK',
    'GBR': 'UK',
    'AUSTRALIA': 'AU',
    'AUS': 'AU',
    'FRANCE': 'FR',
    'FRA': 'FR',
    'LUXEMBOURG': 'LU',
    'IRELAND': 'IE',
    'NETHERLANDS': 'NL',
    'SWITZERLAND': 'CH',
    'CANADA': 'CA',
    'JAPAN': 'JP',
}


def normalize_country_code(value: str | None) -> str:
    if not value:
        return ''
    cleaned = str(value).strip().upper()
    return COUNTRY_ALIASES.get(cleaned, cleaned)


def distinct_countries(records, attribute: str = 'country_code') -> set[str]:
    countries = set()
    for record in records:
        code = normalize_country_code(getattr(record, attribute, ''))
        if code:
            countries.add(code)
    return countries
