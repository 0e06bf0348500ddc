"""
Scalewise Services Module

This module contains the business logic services of the Scalewise backend.
Aggregation services are pure and synchronous; only the key-value store
touches I/O.

Services:
- parsing: Amount parser and date normalizer
- ingestion: Raw spreadsheet rows -> typed record variants
- grouping: Record grouper with ordered per-day sub-totals
- metrics: ROI, consistency, trend and performance score
- scaling: Ordered scaling recommendation decision list
- projection: Day-by-day cash projection and invoice partitioning
- offer_performance: Offer and media buyer performance pipeline
- kv_store: Injected key-value store collaborator

All services are designed to be consumed by the API layer (scalewise/api/)
and the jobs (scalewise/jobs/).
"""

# =============================================================================
# Parsing Service Exports
# =============================================================================

from scalewise.services.parsing import (
    ParsedAmount,
    parse_amount,
    parse_amount_detailed,
    parse_date,
    same_day,
    today_in,
)

# =============================================================================
# Ingestion Service Exports
# =============================================================================

from scalewise.services.ingestion import (
    TypedDataset,
    load_dataset,
    records_from_csv,
    to_financial_resources,
    to_invoice_records,
    to_payroll_records,
    to_performance_records,
)

# =============================================================================
# Grouping Service Exports
# =============================================================================

from scalewise.services.grouping import (
    AggregateGroup,
    GroupExtractors,
    PeriodTotals,
    aggregate,
    day_key,
    group_by,
    media_buyer_key,
    month_key,
    network_offer_key,
    reduce_group,
)

# =============================================================================
# Metric Service Exports
# =============================================================================

from scalewise.services.metrics import (
    calculate_consistency,
    calculate_metrics,
    calculate_performance_score,
    calculate_roi,
    calculate_trend,
)

# =============================================================================
# Scaling Service Exports
# =============================================================================

from scalewise.services.scaling import (
    priority_offers,
    recommend,
    summarize_scaling,
)

# =============================================================================
# Projection Service Exports
# =============================================================================

from scalewise.services.projection import (
    average_daily_spend,
    build_cash_projection,
    partition_invoices,
    project,
    summarize_resources,
)

# =============================================================================
# Offer Performance Service Exports
# =============================================================================

from scalewise.services.offer_performance import (
    active_media_buyers,
    analyze_media_buyers,
    analyze_offers,
    build_offer_report,
    daily_totals,
    media_buyer_breakdown,
    monthly_totals,
)

# =============================================================================
# Key-Value Store Exports
# =============================================================================

from scalewise.services.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    PostgresKeyValueStore,
    get_store,
)


__all__ = [
    # Parsing
    'ParsedAmount',
    'parse_amount',
    'parse_amount_detailed',
    'parse_date',
    'same_day',
    'today_in',
    # Ingestion
    'TypedDataset',
    'load_dataset',
    'records_from_csv',
    'to_financial_resources',
    'to_invoice_records',
    'to_payroll_records',
    'to_performance_records',
    # Grouping
    'AggregateGroup',
    'GroupExtractors',
    'PeriodTotals',
    'aggregate',
    'day_key',
    'group_by',
    'media_buyer_key',
    'month_key',
    'network_offer_key',
    'reduce_group',
    # Metrics
    'calculate_consistency',
    'calculate_metrics',
    'calculate_performance_score',
    'calculate_roi',
    'calculate_trend',
    # Scaling
    'priority_offers',
    'recommend',
    'summarize_scaling',
    # Projection
    'average_daily_spend',
    'build_cash_projection',
    'partition_invoices',
    'project',
    'summarize_resources',
    # Offer performance
    'active_media_buyers',
    'analyze_media_buyers',
    'analyze_offers',
    'build_offer_report',
    'daily_totals',
    'media_buyer_breakdown',
    'monthly_totals',
    # Key-value store
    'InMemoryKeyValueStore',
    'KeyValueStore',
    'PostgresKeyValueStore',
    'get_store',
]
