"""
Cash projection builder.

Walks a fixed horizon day by day from an anchor date, attaches the inflow and
outflow line items due on each day, and carries a running balance forward.

Key Functions:
- project: Core day loop, always returns exactly horizon_days entries
- partition_invoices: Split unpaid invoices into overdue / upcoming / undated
- summarize_resources: Cash vs credit position from financial resources
- average_daily_spend: Mean ad spend over the most recent distinct days
- build_cash_projection: Full pipeline from typed records to a CashProjection

Balance Recurrence:
    balance[0] = starting_balance + inflows[0] - outflows[0]
    balance[i] = balance[i-1] + inflows[i] - outflows[i]

Overdue invoices (due strictly before the anchor date) never enter the
forward projection; they are reported separately in the InvoicePartition.

Usage:
    from scalewise.services.projection import project

    days = project(75000.0, inflows, outflows, horizon_days=30, anchor_date=date(2024, 1, 5))
    print(days[-1].balance)
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from scalewise.core.config import Settings, get_settings
from scalewise.models import (
    AccountType,
    CashProjection,
    FinancialResource,
    InvoicePartition,
    InvoiceRecord,
    InvoiceStatus,
    LineItem,
    LineItemCategory,
    PayrollRecord,
    PerformanceRecord,
    ProjectionDay,
    ResourceSummary,
)
from scalewise.services.parsing import TimezoneLike, parse_date, today_in

logger = logging.getLogger(__name__)

DAILY_SPEND_DESCRIPTION = "Average Daily Spend"


# =============================================================================
# Core Day Loop
# =============================================================================


def _index_by_day(items: Optional[Iterable[LineItem]], tz: TimezoneLike) -> Dict[date, List[LineItem]]:
    """Parse each item's due date once; unparseable dates never match a day."""
    by_day: Dict[date, List[LineItem]] = defaultdict(list)
    for item in items or []:
        due = parse_date(item.dueDate, tz=tz)
        if due is None:
            logger.debug(f"Line item {item.description!r} has no usable due date; skipped")
            continue
        by_day[due].append(item)
    return by_day


def project(
    starting_balance: float,
    inflows: Optional[Sequence[LineItem]],
    outflows: Optional[Sequence[LineItem]],
    horizon_days: int,
    anchor_date: Any,
    tz: TimezoneLike = None,
) -> List[ProjectionDay]:
    """
    Build a day-by-day cash projection.

    Every day of the horizon is present, including days with no activity,
    whose balance is carried forward unchanged. A horizon of zero or less
    yields an empty list.

    Args:
        starting_balance: Balance before the first projected day.
        inflows: Line items adding cash on their due date.
        outflows: Line items removing cash on their due date.
        horizon_days: Number of days to project.
        anchor_date: First projected day (date or any parseable date string).
            When it cannot be parsed, today in the reporting timezone is used.
        tz: Reporting timezone.

    Returns:
        List[ProjectionDay]: Exactly max(horizon_days, 0) entries.

    Example:
        >>> days = project(1000.0, [], [], horizon_days=3, anchor_date=date(2024, 1, 5))
        >>> [d.balance for d in days]
        [1000.0, 1000.0, 1000.0]
    """
    anchor = parse_date(anchor_date, tz=tz)
    if anchor is None:
        anchor = today_in(tz)

    inflows_by_day = _index_by_day(inflows, tz)
    outflows_by_day = _index_by_day(outflows, tz)

    days: List[ProjectionDay] = []
    balance = starting_balance

    for offset in range(max(horizon_days, 0)):
        day = anchor + timedelta(days=offset)
        day_inflows = inflows_by_day.get(day, [])
        day_outflows = outflows_by_day.get(day, [])

        total_in = sum(item.amount for item in day_inflows)
        total_out = sum(item.amount for item in day_outflows)
        balance = balance + total_in - total_out

        days.append(ProjectionDay(
            date=day,
            inflows=list(day_inflows),
            outflows=list(day_outflows),
            totalInflows=total_in,
            totalOutflows=total_out,
            balance=balance,
        ))

    return days


# =============================================================================
# Invoices
# =============================================================================


def is_unpaid(invoice: InvoiceRecord) -> bool:
    """An invoice is unpaid unless its status says Paid; empty status counts as unpaid."""
    status = (invoice.status or '').strip().lower()
    return status != InvoiceStatus.PAID.value.lower()


def partition_invoices(invoices: Optional[Iterable[InvoiceRecord]], anchor_date: date) -> InvoicePartition:
    """
    Split unpaid invoices relative to an anchor date.

    - overdue: due strictly before anchor_date
    - upcoming: due on or after anchor_date
    - undated: due date missing or unparseable

    Args:
        invoices: Typed invoice records.
        anchor_date: Usually today in the reporting timezone.

    Returns:
        InvoicePartition: The three lists with their amount totals.

    Example:
        >>> partition = partition_invoices([InvoiceRecord(amount=500, dueDate=date(2024, 1, 1))], date(2024, 1, 5))
        >>> partition.overdueTotal
        500.0
    """
    partition = InvoicePartition(anchorDate=anchor_date)

    for invoice in invoices or []:
        if not is_unpaid(invoice):
            continue
        if invoice.dueDate is None:
            partition.undated.append(invoice)
            partition.undatedTotal += invoice.amount
        elif invoice.dueDate < anchor_date:
            partition.overdue.append(invoice)
            partition.overdueTotal += invoice.amount
        else:
            partition.upcoming.append(invoice)
            partition.upcomingTotal += invoice.amount

    if partition.overdue:
        logger.info(
            f"{len(partition.overdue)} overdue invoice(s) totalling "
            f"${partition.overdueTotal:,.2f} as of {anchor_date.isoformat()}"
        )
    return partition


def invoice_line_item(invoice: InvoiceRecord) -> LineItem:
    return LineItem(
        description=invoice.network or invoice.invoiceNumber or 'Network Payment',
        amount=invoice.amount,
        dueDate=invoice.dueDate,
        category=LineItemCategory.INVOICE,
    )


def payroll_line_item(payroll: PayrollRecord) -> LineItem:
    return LineItem(
        description=payroll.description or payroll.type or 'Payroll',
        amount=payroll.amount,
        dueDate=payroll.dueDate,
        category=LineItemCategory.PAYROLL,
    )


# =============================================================================
# Financial Resources
# =============================================================================


def classify_account(resource: FinancialResource, settings: Optional[Settings] = None) -> AccountType:
    """
    Decide whether a financial resource is cash or credit.

    Checked in order: the explicit cash account list, credit card keywords,
    cash keywords, then a non-zero limit or balance owed means credit.
    """
    settings = settings or get_settings()
    name = resource.account.strip()
    lowered = name.lower()

    if name in settings.cash_accounts:
        return AccountType.CASH
    if any(keyword in lowered for keyword in settings.credit_card_keywords):
        return AccountType.CREDIT
    if any(keyword in lowered for keyword in settings.cash_account_keywords):
        return AccountType.CASH
    if resource.limit > 0 or resource.owing > 0:
        return AccountType.CREDIT
    return AccountType.OTHER


def credit_owing(resource: FinancialResource) -> float:
    """Amount owed on a credit line; falls back to limit minus available."""
    if resource.owing:
        return resource.owing
    return max(0.0, resource.limit - resource.available)


def summarize_resources(
    resources: Optional[Iterable[FinancialResource]],
    settings: Optional[Settings] = None,
) -> ResourceSummary:
    """
    Total the cash and credit position.

    Args:
        resources: Typed financial resources.
        settings: Supplies the cash account list and keyword tables.

    Returns:
        ResourceSummary: Cash, credit available/owing/limit and combined availability.
    """
    settings = settings or get_settings()
    summary = ResourceSummary()

    for resource in resources or []:
        account_type = classify_account(resource, settings)
        if account_type == AccountType.CASH:
            summary.totalCash += resource.available
            summary.cashAccounts.append(resource.account)
        elif account_type == AccountType.CREDIT:
            summary.creditAvailable += resource.available
            summary.creditOwing += credit_owing(resource)
            summary.creditLimit += resource.limit
            summary.creditAccounts.append(resource.account)

    summary.totalAvailable = summary.totalCash + summary.creditAvailable
    return summary


def credit_card_line_items(
    resources: Optional[Iterable[FinancialResource]],
    settings: Optional[Settings] = None,
) -> List[LineItem]:
    """Outflows for credit lines that carry a payment due date and a balance owed."""
    settings = settings or get_settings()
    items: List[LineItem] = []
    for resource in resources or []:
        if resource.dueDate is None or classify_account(resource, settings) != AccountType.CREDIT:
            continue
        owing = credit_owing(resource)
        if owing <= 0:
            continue
        items.append(LineItem(
            description=resource.account,
            amount=owing,
            dueDate=resource.dueDate,
            category=LineItemCategory.CREDIT_CARD,
        ))
    return items


# =============================================================================
# Ad Spend
# =============================================================================


def average_daily_spend(records: Optional[Iterable[PerformanceRecord]], days: int = 7) -> float:
    """
    Mean per-day ad spend over the most recent `days` distinct dated days.

    Undated records are ignored. Returns 0.0 when no dated record exists.
    """
    spend_by_day: Dict[date, float] = defaultdict(float)
    for record in records or []:
        if record.date is not None:
            spend_by_day[record.date] += record.adSpend

    if not spend_by_day or days <= 0:
        return 0.0

    recent_days = sorted(spend_by_day)[-days:]
    return sum(spend_by_day[day] for day in recent_days) / len(recent_days)


def daily_spend_line_items(daily_spend: float, anchor_date: date, horizon_days: int) -> List[LineItem]:
    """One ad spend outflow per projected day."""
    if daily_spend <= 0:
        return []
    return [
        LineItem(
            description=DAILY_SPEND_DESCRIPTION,
            amount=daily_spend,
            dueDate=anchor_date + timedelta(days=offset),
            category=LineItemCategory.AD_SPEND,
        )
        for offset in range(max(horizon_days, 0))
    ]


# =============================================================================
# Full Pipeline
# =============================================================================


def _lowest_balance(days: Sequence[ProjectionDay], starting_balance: float) -> Tuple[float, Optional[date]]:
    lowest, lowest_date = starting_balance, None
    for day in days:
        if day.balance < lowest:
            lowest, lowest_date = day.balance, day.date
    return lowest, lowest_date


def build_cash_projection(
    resources: Optional[Iterable[FinancialResource]],
    invoices: Optional[Iterable[InvoiceRecord]],
    payroll: Optional[Iterable[PayrollRecord]],
    anchor_date: Optional[date] = None,
    horizon_days: Optional[int] = None,
    daily_spend: float = 0.0,
    settings: Optional[Settings] = None,
) -> CashProjection:
    """
    Build a forward cash projection from typed records.

    Starting balance is the total cash across cash accounts. Inflows are the
    upcoming unpaid invoices; overdue and undated invoices are excluded and
    reported in the invoice partition. Outflows are payroll, credit card
    payments with a due date, and an optional flat daily ad spend.

    Args:
        resources: Bank accounts and credit lines.
        invoices: Network invoices.
        payroll: Payroll rows.
        anchor_date: First projected day. Defaults to today in the reporting timezone.
        horizon_days: Defaults to Settings.projection_horizon_days.
        daily_spend: Flat ad spend outflow added to every day.
        settings: Application settings.

    Returns:
        CashProjection: Days plus totals, ending and lowest balance.
    """
    settings = settings or get_settings()
    tz = settings.reporting_timezone
    anchor = anchor_date or today_in(tz)
    horizon = settings.projection_horizon_days if horizon_days is None else horizon_days

    resource_list = list(resources or [])
    summary = summarize_resources(resource_list, settings)
    partition = partition_invoices(invoices, anchor)

    inflows = [invoice_line_item(invoice) for invoice in partition.upcoming]
    outflows = [payroll_line_item(item) for item in payroll or []]
    outflows.extend(credit_card_line_items(resource_list, settings))
    outflows.extend(daily_spend_line_items(daily_spend, anchor, horizon))

    days = project(summary.totalCash, inflows, outflows, horizon, anchor, tz=tz)
    lowest, lowest_date = _lowest_balance(days, summary.totalCash)
    first_negative = next((day.date for day in days if day.balance < 0), None)
    ending = days[-1].balance if days else summary.totalCash

    logger.info(
        f"Cash projection from {anchor.isoformat()} over {horizon} days: "
        f"start ${summary.totalCash:,.2f}, end ${ending:,.2f}"
    )

    return CashProjection(
        anchorDate=anchor,
        horizonDays=horizon,
        startingBalance=summary.totalCash,
        dailySpend=daily_spend,
        days=days,
        totalInflows=sum(day.totalInflows for day in days),
        totalOutflows=sum(day.totalOutflows for day in days),
        endingBalance=ending,
        lowestBalance=lowest,
        lowestBalanceDate=lowest_date,
        firstNegativeDate=first_negative,
        invoices=partition,
        resources=summary,
    )


__all__ = [
    'DAILY_SPEND_DESCRIPTION',
    'project',
    'is_unpaid',
    'partition_invoices',
    'invoice_line_item',
    'payroll_line_item',
    'classify_account',
    'credit_owing',
    'summarize_resources',
    'credit_card_line_items',
    'average_daily_spend',
    'daily_spend_line_items',
    'build_cash_projection',
]
