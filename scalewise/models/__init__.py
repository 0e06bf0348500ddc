"""
Package initialization file for Scalewise models.

This module exports all Pydantic schemas and enumerations from schemas.py and enums.py,
making them importable from scalewise.models directly.

Usage:
    from scalewise.models import (
        PerformanceRecord,
        PerformanceMetrics,
        ScalingAction,
        ProjectionDay,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from scalewise.models.enums import (
    ScalingAction,
    LineItemCategory,
    AccountType,
    InvoiceStatus,
    TrendDirection,
)

# =============================================================================
# Schemas
# =============================================================================

from scalewise.models.schemas import (
    # Record variants
    PerformanceRecord,
    InvoiceRecord,
    PayrollRecord,
    FinancialResource,
    # Metrics and recommendations
    PerformanceMetrics,
    ScalingRecommendation,
    # Summaries
    MediaBuyerSummary,
    MediaBuyerBreakdown,
    OfferPerformance,
    ScalingInsights,
    PriorityOffers,
    MediaBuyerPerformance,
    PeriodSummary,
    # Cash projection
    LineItem,
    ProjectionDay,
    InvoicePartition,
    ResourceSummary,
    CashProjection,
    # API envelopes
    DashboardDataset,
    DateRangeRequest,
    OfferPerformanceRequest,
    OfferPerformanceResponse,
    MediaBuyerBreakdownRequest,
    CashProjectionRequest,
    NotePayload,
    NoteResponse,
    WeeklyDigestRequest,
)

__all__ = [
    'ScalingAction',
    'LineItemCategory',
    'AccountType',
    'InvoiceStatus',
    'TrendDirection',
    'PerformanceRecord',
    'InvoiceRecord',
    'PayrollRecord',
    'FinancialResource',
    'PerformanceMetrics',
    'ScalingRecommendation',
    'MediaBuyerSummary',
    'MediaBuyerBreakdown',
    'OfferPerformance',
    'ScalingInsights',
    'PriorityOffers',
    'MediaBuyerPerformance',
    'PeriodSummary',
    'LineItem',
    'ProjectionDay',
    'InvoicePartition',
    'ResourceSummary',
    'CashProjection',
    'DashboardDataset',
    'DateRangeRequest',
    'OfferPerformanceRequest',
    'OfferPerformanceResponse',
    'MediaBuyerBreakdownRequest',
    'CashProjectionRequest',
    'NotePayload',
    'NoteResponse',
    'WeeklyDigestRequest',
]
