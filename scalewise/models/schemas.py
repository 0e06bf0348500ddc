"""
Pydantic request/response models for the Scalewise backend.

This module provides type-safe data validation and serialization for:
- Tagged record variants (performance, invoice, payroll, financial resource)
  produced at the ingestion boundary from raw spreadsheet rows
- Derived metrics and scaling recommendations
- Offer, media buyer and period summaries
- Cash projection days, invoice partitions and resource summaries
- API request envelopes

Field names are camelCase because they are the API contract consumed by the
dashboard frontend. Record models carry already-parsed amounts and dates;
raw spreadsheet values are only ever handled by services/ingestion.py.

All models use Pydantic v2 syntax with proper field validation and examples.
"""

from datetime import date as DateType
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scalewise.models.enums import (
    AccountType,
    LineItemCategory,
    ScalingAction,
    TrendDirection,
)


# =============================================================================
# Record Variants (converted at the ingestion boundary)
# =============================================================================


class PerformanceRecord(BaseModel):
    """
    One day of ad-network performance for a single media buyer on one offer.

    Amounts are already parsed; a missing or malformed spreadsheet value shows
    up here as 0.0 and an unparseable date as None.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "date": "2024-03-14",
                "network": "ACA",
                "offer": "Banner",
                "mediaBuyer": "Mike",
                "adSpend": 1250.0,
                "totalRevenue": 1980.5
            }
        }
    )

    date: Optional[DateType] = Field(default=None, description="Calendar day of the row")
    network: str = Field(default="", description="Ad network name")
    offer: str = Field(default="", description="Offer name")
    mediaBuyer: str = Field(default="", description="Media buyer running the traffic")
    adSpend: float = Field(default=0.0, description="Ad spend in USD")
    totalRevenue: float = Field(default=0.0, description="Total revenue in USD")

    @property
    def margin(self) -> float:
        return self.totalRevenue - self.adSpend


class InvoiceRecord(BaseModel):
    """Network invoice expected to be paid to the business."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "network": "Suited Connector",
                "amount": 18250.0,
                "dueDate": "2024-01-15",
                "periodStart": "2024-01-01",
                "periodEnd": "2024-01-07",
                "invoiceNumber": "INV-1042",
                "status": "Unpaid"
            }
        }
    )

    network: str = Field(default="", description="Paying network")
    amount: float = Field(default=0.0, description="Invoice amount in USD")
    dueDate: Optional[DateType] = Field(default=None, description="Payment due date")
    periodStart: Optional[DateType] = Field(default=None, description="Billing period start")
    periodEnd: Optional[DateType] = Field(default=None, description="Billing period end")
    invoiceNumber: str = Field(default="", description="Invoice identifier")
    status: Optional[str] = Field(default=None, description="Paid / Unpaid; empty means unpaid")


class PayrollRecord(BaseModel):
    """Scheduled payroll or contractor payment."""
    type: str = Field(default="", description="Payroll type (Payroll, Contractor, Commission)")
    amount: float = Field(default=0.0, description="Payment amount in USD")
    dueDate: Optional[DateType] = Field(default=None, description="Payment date")
    description: str = Field(default="", description="Free text description")


class FinancialResource(BaseModel):
    """A bank account or credit line with its current balances."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "account": "Amex Platinum",
                "available": 42000.0,
                "owing": 8000.0,
                "limit": 50000.0
            }
        }
    )

    account: str = Field(default="", description="Account name")
    available: float = Field(default=0.0, description="Available balance or credit")
    owing: float = Field(default=0.0, description="Amount owed on a credit line")
    limit: float = Field(default=0.0, description="Credit limit")
    dueDate: Optional[DateType] = Field(default=None, description="Next payment due date for a credit line")


# =============================================================================
# Metrics and Recommendations
# =============================================================================


class PerformanceMetrics(BaseModel):
    """
    Derived, read-only metrics for one aggregate group.

    Every field defaults to zero so a partial metrics tuple can be posted to
    the recommendation endpoint.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "roi": 58.4,
                "consistency": 81.2,
                "marginTrend": 6.5,
                "volumeTrend": 12.0,
                "performanceScore": 49,
                "daysActive": 14,
                "totalMargin": 7300.0,
                "totalRevenue": 19800.0,
                "totalSpend": 12500.0
            }
        }
    )

    roi: float = Field(default=0.0, description="margin / spend * 100")
    consistency: float = Field(default=0.0, ge=0.0, le=100.0, description="100 minus CV% of per-period margin")
    marginTrend: float = Field(default=0.0, description="Second-half vs first-half margin change %")
    volumeTrend: float = Field(default=0.0, description="Second-half vs first-half spend change %")
    performanceScore: int = Field(default=0, description="Composite heuristic score, shown as X/100")
    daysActive: int = Field(default=0, ge=0, description="Number of distinct periods with activity")
    totalMargin: float = Field(default=0.0, description="Revenue minus spend")
    totalRevenue: float = Field(default=0.0, description="Summed revenue")
    totalSpend: float = Field(default=0.0, description="Summed ad spend")


class ScalingRecommendation(BaseModel):
    """Scaling category plus its presentation metadata."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "action": "SCALE_AGGRESSIVE",
                "label": "Scale Aggressive",
                "reason": "High ROI with good consistency",
                "recommendation": "Increase budget 50-100%"
            }
        }
    )

    action: ScalingAction = Field(..., description="Recommendation category")
    label: str = Field(..., description="Short display label")
    reason: str = Field(..., description="Why this category was chosen")
    recommendation: str = Field(..., description="Suggested action")


# =============================================================================
# Offer and Media Buyer Summaries
# =============================================================================


class MediaBuyerSummary(BaseModel):
    """Totals for one media buyer, either within an offer or overall."""
    mediaBuyer: str
    totalRevenue: float = 0.0
    totalSpend: float = 0.0
    totalMargin: float = 0.0
    roi: float = 0.0
    daysActive: int = 0
    avgDailyMargin: float = 0.0


class MediaBuyerBreakdown(BaseModel):
    """Per-buyer results for one offer."""
    offerKey: str
    buyers: List[MediaBuyerSummary] = Field(default_factory=list)
    profitableBuyers: int = 0
    unprofitableBuyers: int = 0


class OfferPerformance(BaseModel):
    """Aggregated performance, metrics and recommendation for a network-offer pair."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "offerKey": "ACA - Banner",
                "network": "ACA",
                "offer": "Banner",
                "totalRevenue": 19800.0,
                "totalSpend": 12500.0,
                "totalMargin": 7300.0,
                "commentRevenue": 0.0,
                "adSpendMargin": 7300.0,
                "daysActive": 14,
                "mediaBuyers": ["Mike", "Zel"],
                "trendDirection": "up"
            }
        }
    )

    offerKey: str = Field(..., description="Normalized '{network} - {offer}' key")
    network: str = Field(default="", description="Network part of the key")
    offer: str = Field(default="", description="Normalized offer part of the key")
    totalRevenue: float = 0.0
    totalSpend: float = 0.0
    totalMargin: float = 0.0
    commentRevenue: float = Field(default=0.0, description="Revenue booked to the comment revenue buyer")
    adSpendMargin: float = Field(default=0.0, description="Margin from paid media buyers only")
    daysActive: int = 0
    mediaBuyers: List[str] = Field(default_factory=list)
    trendDirection: TrendDirection = TrendDirection.FLAT
    metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    recommendation: Optional[ScalingRecommendation] = None
    buyerBreakdown: Optional[MediaBuyerBreakdown] = None


class ScalingInsights(BaseModel):
    """Portfolio-level roll-up of scaling recommendations."""
    scaleUpCount: int = 0
    scaleBackCount: int = 0
    reviewCount: int = 0
    learningCount: int = 0
    lowVolumeCount: int = 0
    totalPotentialGain: float = Field(default=0.0, description="30-day margin of scale-up offers")
    totalAtRisk: float = Field(default=0.0, description="30-day margin of scale-back offers")
    topPerformer: Optional[str] = Field(default=None, description="Offer key with the best positive score")
    topPerformerScore: Optional[int] = None


class PriorityOffers(BaseModel):
    """Top offers that need attention, per action."""
    scaleAggressive: List[OfferPerformance] = Field(default_factory=list)
    scaleBack: List[OfferPerformance] = Field(default_factory=list)
    dataReview: List[OfferPerformance] = Field(default_factory=list)


class MediaBuyerPerformance(BaseModel):
    """Cross-offer performance for a single media buyer."""
    mediaBuyer: str
    offers: List[str] = Field(default_factory=list)
    isActive: bool = True
    metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)


class PeriodSummary(BaseModel):
    """Revenue, spend and margin for one calendar day or month."""
    period: str = Field(..., description="ISO date, YYYY-MM, or 'undated'")
    totalRevenue: float = 0.0
    totalSpend: float = 0.0
    totalMargin: float = 0.0
    roi: float = 0.0
    profitMargin: float = 0.0


# =============================================================================
# Cash Projection Models
# =============================================================================


class LineItem(BaseModel):
    """
    A single dated inflow or outflow.

    dueDate may be a parsed date or a raw string; the projection builder runs
    it through the date normalizer and an unparseable value never matches a day.
    """
    description: str = ""
    amount: float = 0.0
    dueDate: Optional[Union[DateType, str]] = None
    category: LineItemCategory = LineItemCategory.OTHER


class ProjectionDay(BaseModel):
    """One day of a cash projection with its running balance."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "date": "2024-01-05",
                "inflows": [{"description": "ACA", "amount": 18250.0, "dueDate": "2024-01-05", "category": "invoice"}],
                "outflows": [],
                "totalInflows": 18250.0,
                "totalOutflows": 0.0,
                "balance": 93250.0
            }
        }
    )

    date: DateType
    inflows: List[LineItem] = Field(default_factory=list)
    outflows: List[LineItem] = Field(default_factory=list)
    totalInflows: float = 0.0
    totalOutflows: float = 0.0
    balance: float = 0.0


class InvoicePartition(BaseModel):
    """Unpaid invoices split relative to an anchor date."""
    anchorDate: DateType
    overdue: List[InvoiceRecord] = Field(default_factory=list)
    upcoming: List[InvoiceRecord] = Field(default_factory=list)
    undated: List[InvoiceRecord] = Field(default_factory=list)
    overdueTotal: float = 0.0
    upcomingTotal: float = 0.0
    undatedTotal: float = 0.0


class ResourceSummary(BaseModel):
    """Cash and credit position from the financial resources sheet."""
    totalCash: float = 0.0
    creditAvailable: float = 0.0
    creditOwing: float = 0.0
    creditLimit: float = 0.0
    totalAvailable: float = Field(default=0.0, description="Cash plus available credit")
    cashAccounts: List[str] = Field(default_factory=list)
    creditAccounts: List[str] = Field(default_factory=list)


class CashProjection(BaseModel):
    """Day-by-day forward cash projection plus headline figures."""
    anchorDate: DateType
    horizonDays: int
    startingBalance: float = 0.0
    dailySpend: float = 0.0
    days: List[ProjectionDay] = Field(default_factory=list)
    totalInflows: float = 0.0
    totalOutflows: float = 0.0
    endingBalance: float = 0.0
    lowestBalance: float = 0.0
    lowestBalanceDate: Optional[DateType] = None
    firstNegativeDate: Optional[DateType] = None
    invoices: Optional[InvoicePartition] = None
    resources: Optional[ResourceSummary] = None


# =============================================================================
# API Request / Response Models
# =============================================================================


class DashboardDataset(BaseModel):
    """
    Raw datasets exactly as returned by the spreadsheet-backed data source.

    Rows are loose key/value mappings with inconsistent typing. A missing
    dataset (null) is treated as an empty list.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "performanceData": [
                    {"Date": "3/14/2024", "Network": "ACA", "Offer": "Banner Edge",
                     "Media Buyer": "Mike", "Ad Spend": "$1,250.00", "Total Revenue": "$1,980.50"}
                ],
                "invoicesData": [
                    {"Network": "ACA", "Amount": "$18,250", "DueDate": "2024-03-20", "Status": "Unpaid"}
                ],
                "payrollData": [],
                "financialResources": [
                    {"Account Name": "Cash in Bank", "Available": "$75,000"}
                ],
                "networkTerms": []
            }
        }
    )

    performanceData: List[Dict[str, Any]] = Field(default_factory=list)
    invoicesData: List[Dict[str, Any]] = Field(default_factory=list)
    payrollData: List[Dict[str, Any]] = Field(default_factory=list)
    financialResources: List[Dict[str, Any]] = Field(default_factory=list)
    networkTerms: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator(
        'performanceData', 'invoicesData', 'payrollData', 'financialResources', 'networkTerms',
        mode='before',
    )
    @classmethod
    def _missing_dataset_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class DateRangeRequest(BaseModel):
    """Dataset plus an optional inclusive reporting window."""
    dataset: DashboardDataset = Field(default_factory=DashboardDataset)
    startDate: Optional[DateType] = None
    endDate: Optional[DateType] = None


class OfferPerformanceRequest(DateRangeRequest):
    includeBuyerBreakdown: bool = Field(default=False, description="Attach per-buyer results to each offer")


class OfferPerformanceResponse(BaseModel):
    offers: List[OfferPerformance] = Field(default_factory=list)
    insights: ScalingInsights = Field(default_factory=ScalingInsights)
    priorities: PriorityOffers = Field(default_factory=PriorityOffers)
    startDate: Optional[DateType] = None
    endDate: Optional[DateType] = None


class MediaBuyerBreakdownRequest(DateRangeRequest):
    offerKey: str = Field(..., min_length=1, description="Normalized '{network} - {offer}' key")


class CashProjectionRequest(BaseModel):
    dataset: DashboardDataset = Field(default_factory=DashboardDataset)
    anchorDate: Optional[DateType] = Field(default=None, description="Defaults to today in the reporting timezone")
    horizonDays: Optional[int] = Field(default=None, ge=0, le=366)
    includeAverageSpend: bool = Field(default=False, description="Add the recent average daily ad spend as an outflow")


class NotePayload(BaseModel):
    value: Any = None


class NoteResponse(BaseModel):
    key: str
    value: Any = None


class WeeklyDigestRequest(BaseModel):
    """Trigger for the weekly Slack digest."""
    dataset: DashboardDataset = Field(default_factory=DashboardDataset)
    endDate: Optional[DateType] = Field(default=None, description="Last day of the week; defaults to yesterday")
    force: bool = Field(default=False, description="Send even if already sent for endDate")


__all__ = [
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
