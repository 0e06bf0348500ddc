"""
Metric calculator for aggregated performance groups.

Derives ROI, consistency, trend and the composite performance score from an
AggregateGroup's totals and its ordered per-period sub-totals.

Key Functions:
- calculate_roi: margin / spend * 100, 0 when there is no spend
- calculate_profit_margin: (revenue - spend) / revenue * 100
- calculate_consistency: 100 minus the coefficient of variation (as %), clamped to [0, 100]
- calculate_trend: Second-half vs first-half average change (%)
- calculate_performance_score: Composite score blending ROI, consistency, trend and volume
- calculate_metrics: All of the above for one AggregateGroup

Performance Score Terms (each clamped before summing, total is not re-clamped):
- ROI:          min(40, roi / 5)
- Consistency:  consistency * 0.2
- Trend:        clamp(0, 20, (volumeTrend + marginTrend) / 2 * 0.5)
- Volume:       min(20, max(0, avgDailyMargin / 50))

Example:
    group = reduce_group("ACA - Banner", records)
    metrics = calculate_metrics(group)
    print(metrics.roi, metrics.consistency, metrics.performanceScore)
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from scalewise.models.enums import TrendDirection
from scalewise.models.schemas import PerformanceMetrics
from scalewise.services.grouping import AggregateGroup

# Relative tolerance below which float noise is treated as "no variation"
_FLOAT_TOLERANCE = 1e-12


# =============================================================================
# Basic Ratios
# =============================================================================


def calculate_roi(margin: float, spend: float) -> float:
    """Return margin / spend * 100, or 0.0 when spend is not positive."""
    if spend > 0:
        return margin / spend * 100
    return 0.0


def calculate_profit_margin(revenue: float, spend: float) -> float:
    """Return (revenue - spend) / revenue * 100, or 0.0 when revenue is 0."""
    if revenue == 0:
        return 0.0
    return (revenue - spend) / revenue * 100


def calculate_change(current: float, previous: float) -> Optional[float]:
    """
    Percentage change from previous to current.

    Returns None when previous is 0, since the change is undefined.
    """
    if previous == 0:
        return None
    return (current - previous) / abs(previous) * 100


def clamp(low: float, high: float, value: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded toward +infinity."""
    return int(math.floor(value + 0.5))


# =============================================================================
# Series Statistics
# =============================================================================


def series_stats(values: Sequence[float]) -> Tuple[float, float]:
    """
    Mean and population standard deviation (ddof=0) of a series.

    Returns (0.0, 0.0) for an empty series.
    """
    if len(values) == 0:
        return (0.0, 0.0)

    values_array = np.array(values, dtype=np.float64)
    return (float(np.mean(values_array)), float(np.std(values_array)))


def calculate_consistency(values: Sequence[float]) -> float:
    """
    Stability score of a per-period series in [0, 100].

    Rules, in order:
    - Empty series: 0
    - Standard deviation of 0: 100
    - Mean of 0: 0
    - Otherwise: clamp(0, 100, 100 - stdDev / |mean| * 100)

    Example:
        >>> calculate_consistency([100, 100, 100])
        100.0
        >>> calculate_consistency([50, 150])
        50.0
    """
    if len(values) == 0:
        return 0.0

    mean_val, std_val = series_stats(values)

    if std_val <= _FLOAT_TOLERANCE * max(1.0, abs(mean_val)):
        return 100.0
    if mean_val == 0:
        return 0.0

    coefficient_of_variation = std_val / abs(mean_val) * 100
    return clamp(0.0, 100.0, 100.0 - coefficient_of_variation)


def calculate_trend(values: Sequence[float]) -> float:
    """
    Percentage change of the second half's average over the first half's.

    The series is split at floor(n / 2); with an odd length the middle value
    belongs to the second half. An empty half averages to 0, and a first-half
    average of 0 yields a trend of 0.

    Example:
        >>> calculate_trend([100, 100, 150, 150])
        50.0
        >>> calculate_trend([7, 7, 7, 7])
        0.0
    """
    midpoint = len(values) // 2
    first_half = values[:midpoint]
    second_half = values[midpoint:]

    first_avg = series_stats(first_half)[0]
    second_avg = series_stats(second_half)[0]

    if first_avg == 0:
        return 0.0
    if math.isclose(first_avg, second_avg, rel_tol=_FLOAT_TOLERANCE):
        return 0.0

    return (second_avg - first_avg) / abs(first_avg) * 100


def trend_direction(trend: float) -> TrendDirection:
    if trend > 0:
        return TrendDirection.UP
    if trend < 0:
        return TrendDirection.DOWN
    return TrendDirection.FLAT


# =============================================================================
# Composite Score
# =============================================================================


def calculate_performance_score(
    roi: float,
    consistency: float,
    margin_trend: float,
    volume_trend: float,
    total_margin: float,
    days_active: int,
) -> int:
    """
    Composite advisory score, displayed as "X/100".

    Each term is clamped individually; the rounded total is not re-clamped,
    so a deeply negative ROI can produce a negative score.

    Args:
        roi: ROI percentage.
        consistency: Consistency score in [0, 100].
        margin_trend: Margin trend percentage.
        volume_trend: Spend trend percentage.
        total_margin: Total margin in USD.
        days_active: Number of active periods.

    Returns:
        int: Score rounded half up.
    """
    avg_daily_margin = total_margin / days_active if days_active else 0.0

    roi_score = min(40.0, roi / 5)
    consistency_score = consistency * 0.2
    trend_score = clamp(0.0, 20.0, (volume_trend + margin_trend) / 2 * 0.5)
    volume_score = min(20.0, max(0.0, avg_daily_margin / 50))

    return round_half_up(roi_score + consistency_score + trend_score + volume_score)


def calculate_metrics(group: AggregateGroup) -> PerformanceMetrics:
    """
    Compute PerformanceMetrics for one aggregate group.

    Consistency and margin trend use the per-period margins; volume trend
    uses the per-period spend.

    Example:
        >>> metrics = calculate_metrics(group)
        >>> metrics.roi
        50.0
    """
    roi = calculate_roi(group.total_margin, group.total_spend)
    consistency = calculate_consistency(group.period_margins)
    margin_trend = calculate_trend(group.period_margins)
    volume_trend = calculate_trend(group.period_spends)

    score = calculate_performance_score(
        roi=roi,
        consistency=consistency,
        margin_trend=margin_trend,
        volume_trend=volume_trend,
        total_margin=group.total_margin,
        days_active=group.days_active,
    )

    return PerformanceMetrics(
        roi=roi,
        consistency=consistency,
        marginTrend=margin_trend,
        volumeTrend=volume_trend,
        performanceScore=score,
        daysActive=group.days_active,
        totalMargin=group.total_margin,
        totalRevenue=group.total_revenue,
        totalSpend=group.total_spend,
    )


__all__ = [
    'calculate_roi',
    'calculate_profit_margin',
    'calculate_change',
    'clamp',
    'round_half_up',
    'series_stats',
    'calculate_consistency',
    'calculate_trend',
    'trend_direction',
    'calculate_performance_score',
    'calculate_metrics',
]
