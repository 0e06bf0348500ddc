"""
Scaling recommendation engine.

Maps a PerformanceMetrics tuple to a scaling category through an ordered
decision list. The first matching rule wins, so rule order is part of the
contract. Thresholds are business heuristics and are kept as literal
constants.

Decision List (evaluated top to bottom):
    1.  daysActive < 3                                       -> INSUFFICIENT_DATA
    2.  roi > 200 and totalMargin < 500                      -> DATA_REVIEW
    3.  3 <= daysActive < 7                                  -> LEARNING
    4.  daysActive >= 7 and totalMargin < 500                -> LOW_VOLUME
    5.  roi < 10 or totalMargin < 0                          -> SCALE_BACK
    6.  roi >= 50 and consistency >= 70 and marginTrend >= 0 -> SCALE_AGGRESSIVE
    7.  roi >= 25 and (consistency >= 50 or marginTrend >= 10) -> SCALE_CAUTIOUS
    8.  15 <= roi < 25                                       -> MAINTAIN
    9.  consistency < 40 or marginTrend < -20                -> DATA_REVIEW
    10. otherwise                                            -> MAINTAIN

Portfolio helpers:
- summarize_scaling: Counts per action group, 30-day potential gain and
  at-risk margin, top performer by score
- priority_offers: First N offers per attention-worthy action

Example:
    recommendation = recommend(metrics)
    print(recommendation.action, recommendation.reason)
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from scalewise.models.enums import ScalingAction
from scalewise.models.schemas import (
    OfferPerformance,
    PerformanceMetrics,
    PriorityOffers,
    ScalingInsights,
    ScalingRecommendation,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Thresholds
# =============================================================================

MIN_DAYS_FOR_DECISION: int = 3
MIN_DAYS_ESTABLISHED: int = 7
MIN_MARGIN_VOLUME: float = 500.0
SUSPICIOUS_ROI: float = 200.0
SCALE_BACK_ROI: float = 10.0
AGGRESSIVE_ROI: float = 50.0
AGGRESSIVE_CONSISTENCY: float = 70.0
CAUTIOUS_ROI: float = 25.0
CAUTIOUS_CONSISTENCY: float = 50.0
CAUTIOUS_MARGIN_TREND: float = 10.0
MAINTAIN_ROI_FLOOR: float = 15.0
REVIEW_CONSISTENCY: float = 40.0
REVIEW_MARGIN_TREND: float = -20.0

# Number of days a daily margin is extrapolated over for gain/risk estimates
PROJECTION_MULTIPLIER_DAYS: int = 30

SCALE_UP_ACTIONS = (ScalingAction.SCALE_AGGRESSIVE, ScalingAction.SCALE_CAUTIOUS)
REVIEW_ACTIONS = (ScalingAction.DATA_REVIEW, ScalingAction.INSUFFICIENT_DATA)


# =============================================================================
# Presentation Metadata
# =============================================================================

# (label, suggested action) per category
ACTION_CATALOG: Dict[ScalingAction, Tuple[str, str]] = {
    ScalingAction.INSUFFICIENT_DATA: ("Insufficient Data", "Gather more data before making decisions"),
    ScalingAction.DATA_REVIEW: ("Review Data", "Check data quality and tracking accuracy"),
    ScalingAction.LEARNING: ("Learning Phase", "Monitor closely, avoid major changes"),
    ScalingAction.LOW_VOLUME: ("Low Volume", "Focus on scaling and optimization"),
    ScalingAction.SCALE_BACK: ("Scale Back", "Reduce spend 30-50% or pause"),
    ScalingAction.SCALE_AGGRESSIVE: ("Scale Aggressive", "Increase budget 50-100%"),
    ScalingAction.SCALE_CAUTIOUS: ("Scale Cautious", "Increase budget 20-30%"),
    ScalingAction.MAINTAIN: ("Maintain & Optimize", "Maintain spend, optimize creative"),
}

# Rule 9 reuses DATA_REVIEW with a different suggestion
PATTERN_REVIEW_RECOMMENDATION = "Analyze performance patterns"


def _build(action: ScalingAction, reason: str, recommendation: Optional[str] = None) -> ScalingRecommendation:
    label, default_recommendation = ACTION_CATALOG[action]
    return ScalingRecommendation(
        action=action,
        label=label,
        reason=reason,
        recommendation=recommendation or default_recommendation,
    )


# =============================================================================
# Decision List
# =============================================================================


def recommend(metrics: PerformanceMetrics) -> ScalingRecommendation:
    """
    Recommend a scaling action for one offer's metrics.

    Pure function of its input: the same metrics always give the same result.

    Args:
        metrics: Metrics computed by services.metrics.calculate_metrics, or
            any tuple carrying daysActive, roi, totalMargin, consistency and
            marginTrend.

    Returns:
        ScalingRecommendation: Category plus label, reason and suggested action.

    Example:
        >>> recommend(PerformanceMetrics(daysActive=2, roi=300, totalMargin=100)).action
        <ScalingAction.INSUFFICIENT_DATA: 'INSUFFICIENT_DATA'>
    """
    roi = metrics.roi
    total_margin = metrics.totalMargin
    consistency = metrics.consistency
    margin_trend = metrics.marginTrend
    days_active = metrics.daysActive

    # Edge cases first: too little history or numbers that look wrong
    if days_active < MIN_DAYS_FOR_DECISION:
        return _build(ScalingAction.INSUFFICIENT_DATA, "Less than 3 days of data")

    if roi > SUSPICIOUS_ROI and total_margin < MIN_MARGIN_VOLUME:
        return _build(ScalingAction.DATA_REVIEW, "Unusually high ROI with low volume")

    if MIN_DAYS_FOR_DECISION <= days_active < MIN_DAYS_ESTABLISHED:
        return _build(ScalingAction.LEARNING, "Campaign in learning phase")

    if days_active >= MIN_DAYS_ESTABLISHED and total_margin < MIN_MARGIN_VOLUME:
        return _build(ScalingAction.LOW_VOLUME, "Low total profit volume")

    # Established offers with meaningful volume
    # A negative margin always stops at the learning or low-volume rule first,
    # so the "Negative profit" reason never fires here
    if roi < SCALE_BACK_ROI or total_margin < 0:
        reason = "Poor ROI" if roi < SCALE_BACK_ROI else "Negative profit"
        return _build(ScalingAction.SCALE_BACK, reason)

    if roi >= AGGRESSIVE_ROI and consistency >= AGGRESSIVE_CONSISTENCY and margin_trend >= 0:
        return _build(ScalingAction.SCALE_AGGRESSIVE, "High ROI with good consistency")

    if roi >= CAUTIOUS_ROI and (consistency >= CAUTIOUS_CONSISTENCY or margin_trend >= CAUTIOUS_MARGIN_TREND):
        return _build(ScalingAction.SCALE_CAUTIOUS, "Good ROI, scaling with caution")

    if MAINTAIN_ROI_FLOOR <= roi < CAUTIOUS_ROI:
        return _build(ScalingAction.MAINTAIN, "Moderate performance")

    if consistency < REVIEW_CONSISTENCY or margin_trend < REVIEW_MARGIN_TREND:
        reason = "Poor consistency" if consistency < REVIEW_CONSISTENCY else "Declining performance"
        return _build(ScalingAction.DATA_REVIEW, reason, PATTERN_REVIEW_RECOMMENDATION)

    return _build(ScalingAction.MAINTAIN, "Standard performance")


# =============================================================================
# Portfolio Helpers
# =============================================================================


def _action_of(offer: OfferPerformance) -> Optional[ScalingAction]:
    return offer.recommendation.action if offer.recommendation else None


def summarize_scaling(offers: Iterable[OfferPerformance]) -> ScalingInsights:
    """
    Roll scaling recommendations up to portfolio counts and dollar figures.

    totalPotentialGain and totalAtRisk extrapolate each offer's total margin
    over 30 days. The top performer is the offer with the highest positive
    performance score; ties keep the first offer seen.

    Args:
        offers: Offers with recommendations attached.

    Returns:
        ScalingInsights: Aggregated counts and totals.
    """
    insights = ScalingInsights()
    best_score = 0

    for offer in offers:
        action = _action_of(offer)

        if action in SCALE_UP_ACTIONS:
            insights.scaleUpCount += 1
            insights.totalPotentialGain += offer.totalMargin * PROJECTION_MULTIPLIER_DAYS
        elif action == ScalingAction.SCALE_BACK:
            insights.scaleBackCount += 1
            insights.totalAtRisk += offer.totalMargin * PROJECTION_MULTIPLIER_DAYS
        elif action in REVIEW_ACTIONS:
            insights.reviewCount += 1
        elif action == ScalingAction.LEARNING:
            insights.learningCount += 1
        elif action == ScalingAction.LOW_VOLUME:
            insights.lowVolumeCount += 1

        score = offer.metrics.performanceScore
        if score > best_score:
            best_score = score
            insights.topPerformer = offer.offerKey
            insights.topPerformerScore = score

    logger.debug(
        f"Scaling summary: {insights.scaleUpCount} scale-up, "
        f"{insights.scaleBackCount} scale-back, {insights.reviewCount} review"
    )
    return insights


def priority_offers(offers: Iterable[OfferPerformance], limit: int = 3) -> PriorityOffers:
    """
    First `limit` offers (in the given order) per attention-worthy action.

    Args:
        offers: Offers with recommendations, typically sorted by margin.
        limit: Maximum offers per list.
    """
    buckets: Dict[ScalingAction, List[OfferPerformance]] = {
        ScalingAction.SCALE_AGGRESSIVE: [],
        ScalingAction.SCALE_BACK: [],
        ScalingAction.DATA_REVIEW: [],
    }
    for offer in offers:
        bucket = buckets.get(_action_of(offer))
        if bucket is not None and len(bucket) < limit:
            bucket.append(offer)

    return PriorityOffers(
        scaleAggressive=buckets[ScalingAction.SCALE_AGGRESSIVE],
        scaleBack=buckets[ScalingAction.SCALE_BACK],
        dataReview=buckets[ScalingAction.DATA_REVIEW],
    )


__all__ = [
    'ACTION_CATALOG',
    'SCALE_UP_ACTIONS',
    'REVIEW_ACTIONS',
    'recommend',
    'summarize_scaling',
    'priority_offers',
]
