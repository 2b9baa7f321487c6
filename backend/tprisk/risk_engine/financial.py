from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from typing import Any

# Metric names the engine knows how to read. Other keys are kept on the
# record but never interpreted.
KNOWN_METRICS = (
    'revenue',
    'operating_profit',
    'net_profit',
    'total_assets',
    'operating_margin',
    'gross_margin',
    'roa',
    'ros',
    'berry_ratio',
)

BENCHMARK_METRICS = {
    'roa': {'label': 'Return on Assets (%)', 'format': 'percentage'},
    'ros': {'label': 'Return on Sales (%)', 'format': 'percentage'},
    'gross_margin': {'label': 'Gross Margin (%)', 'format': 'percentage'},
    'operating_margin': {'label': 'Operating Margin (%)', 'format': 'percentage'},
    'berry_ratio': {'label': 'Berry Ratio', 'format': 'ratio'},
}


def as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        candidate = value.strip().replace(',', '')
        if not candidate:
            return None
        try:
            number = float(candidate)
        except ValueError:
            return None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


class FinancialData(Mapping):
    def __init__(self, values: Mapping[str, Any] | None = None):
        self._raw = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._raw[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)

    def __repr__(self) -> str:
        return f'FinancialData({self._raw!r})'

    def __eq__(self, other) -> bool:
        if isinstance(other, FinancialData):
            return self._raw == other._raw
        if isinstance(other, Mapping):
            return self._raw == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted((key, repr(value)) for key, value in self._raw.items())))

    def metric(self, name: str) -> float | None:
        return as_number(self._raw.get(name))

    def has_metric(self, name: str) -> bool:
        return self.metric(name) is not None

    def numeric_items(self) -> dict[str, float]:
        items = {}
        for key, value in self._raw.items():
            number = as_number(value)
            if number is not None:
                items[key] = number
        return items

    def unknown_keys(self) -> list[str]:
        return sorted(key for key in self._raw if key not in KNOWN_METRICS)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._raw)
