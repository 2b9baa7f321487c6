from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Any

from tprisk.risk_engine.financial import FinancialData, as_number
from tprisk.risk_engine.types import MIN_RELIABLE_SAMPLE_SIZE, HistogramBin, StatisticalResult

logger = logging.getLogger(__name__)

HISTOGRAM_BINS = 10

SAMPLE_SIZE_WARNING = 'sample_size'
HIGH_VARIABILITY_WARNING = 'high_variability'


def extract_observations(records: Iterable[Any], metric: str) -> list[float]:
    observations = []
    for record in records:
        financial_data = getattr(record, 'financial_data', None)
        if financial_data is None and isinstance(record, dict):
            financial_data = record.get('financial_data')
        if not financial_data:
            continue
        if not isinstance(financial_data, FinancialData):
            financial_data = FinancialData(financial_data)
        value = financial_data.metric(metric)
        if value is not None:
            observations.append(value)
    return observations


def compute_statistics(observations: Sequence[float], metric: str | None = None) -> StatisticalResult | None:
    values = [float(value) for value in observations]
    n = len(values)
    if n == 0:
        return None

    ordered = sorted(values)
    mean = sum(values) / n
    if n % 2 == 0:
        median = (ordered[n // 2 - 1] + ordered[n // 2]) / 2
    else:
        median = ordered[n // 2]

    # Nearest-rank selection, Q3 mirrors Q1 from the top of the sample.
    # This is not sorted[floor(0.75 n)]: the two differ when n is a multiple
    # of 4, e.g. [1..8] gives Q3 6 here and 7 under floor(0.75 n).
    lower_rank = math.floor(n * 0.25)
    q1 = ordered[lower_rank]
    q3 = ordered[n - 1 - lower_rank]

    variance = sum((value - mean) ** 2 for value in values) / n
    standard_deviation = math.sqrt(variance)

    result = StatisticalResult(
        count=n,
        mean=mean,
        median=median,
        min=ordered[0],
        max=ordered[-1],
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
        standard_deviation=standard_deviation,
        arm_length_range={'min': q1, 'max': q3, 'median': median},
        metric=metric,
    )
    logger.debug('Computed statistics for %s over %s observations.', metric or 'observations', n)
    return result


def validity_warnings(result: StatisticalResult) -> list[dict[str, Any]]:
    warnings = []
    if result.sample_size_warning:
        warnings.append({
            'code': SAMPLE_SIZE_WARNING,
            'message': (
                f'With only {result.count} comparables the analysis may not be reliable. '
                f'A minimum of {MIN_RELIABLE_SAMPLE_SIZE} comparables is recommended.'
            ),
        })
    if result.high_variability_warning:
        cv = result.coefficient_of_variation
        rendered = 'undefined' if cv is None or math.isinf(cv) else f'{cv * 100:.1f}%'
        warnings.append({
            'code': HIGH_VARIABILITY_WARNING,
            'message': (
                f'The coefficient of variation is high ({rendered}). '
                'Consider additional comparability adjustments.'
            ),
        })
    return warnings


def histogram(observations: Sequence[float], bins: int = HISTOGRAM_BINS) -> list[HistogramBin]:
    values = [float(value) for value in observations]
    if not values or bins < 1:
        return []

    low = min(values)
    high = max(values)
    width = (high - low) / bins
    counts = [0] * bins

    for value in values:
        if width == 0:
            index = 0
        else:
            index = min(math.floor((value - low) / width), bins - 1)
        counts[index] += 1

    return [
        HistogramBin(
            lower=low + index * width,
            upper=low + (index + 1) * width,
            midpoint=low + (index + 0.5) * width,
            count=counts[index],
        )
        for index in range(bins)
    ]


def benchmark_metric(comparables: Iterable[Any], metric: str) -> StatisticalResult | None:
    return compute_statistics(extract_observations(comparables, metric), metric=metric)


def position_tested_price(tested_price: Any, result: StatisticalResult) -> dict[str, Any]:
    lower = result.arm_length_range['min']
    upper = result.arm_length_range['max']
    price = as_number(tested_price)

    if price is None:
        position = None
    elif price < lower:
        position = 'below'
    elif price > upper:
        position = 'above'
    else:
        position = 'within'

    return {
        'lower_bound': lower,
        'upper_bound': upper,
        'median': result.arm_length_range['median'],
        'tested_price': price,
        'position': position,
    }
