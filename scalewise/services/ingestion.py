"""
Dataset Ingestion Service

Converts the loosely typed rows returned by the spreadsheet-backed data source
into tagged record variants. This is the only place that probes raw column
names; everything downstream works on PerformanceRecord, InvoiceRecord,
PayrollRecord and FinancialResource.

Datasets:
- performanceData: Date, Network, Offer, Media Buyer, Ad Spend, Total Revenue
- invoicesData: Network, Amount, DueDate, PeriodStart, PeriodEnd, InvoiceNumber, Status
- payrollData: Type, Amount, DueDate, Description
- financialResources: Account Name, Available, Owing, Limit, DueDate
- networkTerms: passed through untouched

Key Features:
- Several spellings accepted per column (sheet headers vs camelCase API fields)
- Amounts and dates normalized through services/parsing.py
- Missing datasets treated as empty lists
- Non-mapping rows skipped with a warning, never an exception
- CSV exports loaded with pandas as all-string columns
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, BinaryIO, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union
import io
import logging
import math

import pandas as pd

from scalewise.models import (
    DashboardDataset,
    FinancialResource,
    InvoiceRecord,
    PayrollRecord,
    PerformanceRecord,
)
from scalewise.services.parsing import TimezoneLike, parse_amount, parse_date

# Configure module logger
logger = logging.getLogger(__name__)

T = TypeVar('T')

# =============================================================================
# CONSTANTS - Accepted column spellings, first non-empty wins
# =============================================================================

PERFORMANCE_COLUMNS: Dict[str, Sequence[str]] = {
    'date': ('Date', 'date'),
    'network': ('Network', 'network'),
    'offer': ('Offer', 'offer'),
    'mediaBuyer': ('Media Buyer', 'MediaBuyer', 'mediaBuyer'),
    'adSpend': ('Ad Spend', 'AdSpend', 'adSpend'),
    'totalRevenue': ('Total Revenue', 'TotalRevenue', 'totalRevenue'),
}

INVOICE_COLUMNS: Dict[str, Sequence[str]] = {
    'network': ('Network', 'network'),
    'amount': ('Amount', 'amount'),
    'dueDate': ('DueDate', 'Due Date', 'dueDate'),
    'periodStart': ('PeriodStart', 'Period Start', 'periodStart'),
    'periodEnd': ('PeriodEnd', 'Period End', 'periodEnd'),
    'invoiceNumber': ('InvoiceNumber', 'Invoice Number', 'invoiceNumber'),
    'status': ('Status', 'status'),
}

PAYROLL_COLUMNS: Dict[str, Sequence[str]] = {
    'type': ('Type', 'type'),
    'amount': ('Amount', 'amount'),
    'dueDate': ('DueDate', 'Due Date', 'dueDate'),
    'description': ('Description', 'description'),
}

RESOURCE_COLUMNS: Dict[str, Sequence[str]] = {
    'account': ('Account Name', 'Account', 'account', 'name'),
    'available': ('Available', 'available'),
    'owing': ('Owing', 'owing'),
    'limit': ('Limit', 'limit'),
    'dueDate': ('DueDate', 'Due Date', 'dueDate'),
}


@dataclass
class TypedDataset:
    """
    Typed view of a DashboardDataset.

    Attributes:
        performance: Ad-network performance rows.
        invoices: Network invoices.
        payroll: Payroll and contractor payments.
        resources: Bank accounts and credit lines.
        network_terms: Payment terms rows, untouched.
    """
    performance: List[PerformanceRecord] = field(default_factory=list)
    invoices: List[InvoiceRecord] = field(default_factory=list)
    payroll: List[PayrollRecord] = field(default_factory=list)
    resources: List[FinancialResource] = field(default_factory=list)
    network_terms: List[Dict[str, Any]] = field(default_factory=list)


# =============================================================================
# Field Helpers
# =============================================================================


def _first_value(row: Mapping[str, Any], columns: Sequence[str]) -> Any:
    for column in columns:
        value = row.get(column)
        if value is None:
            continue
        if isinstance(value, float) and math.isnan(value):
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(row: Mapping[str, Any], columns: Sequence[str]) -> str:
    value = _first_value(row, columns)
    return '' if value is None else str(value).strip()


def _optional_text(row: Mapping[str, Any], columns: Sequence[str]) -> Optional[str]:
    return _text(row, columns) or None


def _amount(row: Mapping[str, Any], columns: Sequence[str]) -> float:
    return parse_amount(_first_value(row, columns))


def _day(row: Mapping[str, Any], columns: Sequence[str], tz: TimezoneLike) -> Optional[date]:
    return parse_date(_first_value(row, columns), tz=tz)


def _convert_rows(
    rows: Optional[Iterable[Any]],
    converter: Callable[[Mapping[str, Any]], T],
    dataset_name: str,
) -> List[T]:
    converted: List[T] = []
    skipped = 0
    for row in rows or []:
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        converted.append(converter(row))
    if skipped:
        logger.warning(f"Skipped {skipped} non-mapping row(s) in {dataset_name}")
    return converted


# =============================================================================
# Row Converters
# =============================================================================


def to_performance_records(
    rows: Optional[Iterable[Any]],
    tz: TimezoneLike = None,
) -> List[PerformanceRecord]:
    """
    Convert raw performance rows.

    Example:
        >>> to_performance_records([{"Network": "A", "Offer": "X", "Ad Spend": "$100"}])[0].adSpend
        100.0
    """
    cols = PERFORMANCE_COLUMNS

    def convert(row: Mapping[str, Any]) -> PerformanceRecord:
        return PerformanceRecord(
            date=_day(row, cols['date'], tz),
            network=_text(row, cols['network']),
            offer=_text(row, cols['offer']),
            mediaBuyer=_text(row, cols['mediaBuyer']),
            adSpend=_amount(row, cols['adSpend']),
            totalRevenue=_amount(row, cols['totalRevenue']),
        )

    return _convert_rows(rows, convert, 'performanceData')


def to_invoice_records(
    rows: Optional[Iterable[Any]],
    tz: TimezoneLike = None,
) -> List[InvoiceRecord]:
    """Convert raw invoice rows."""
    cols = INVOICE_COLUMNS

    def convert(row: Mapping[str, Any]) -> InvoiceRecord:
        return InvoiceRecord(
            network=_text(row, cols['network']),
            amount=_amount(row, cols['amount']),
            dueDate=_day(row, cols['dueDate'], tz),
            periodStart=_day(row, cols['periodStart'], tz),
            periodEnd=_day(row, cols['periodEnd'], tz),
            invoiceNumber=_text(row, cols['invoiceNumber']),
            status=_optional_text(row, cols['status']),
        )

    return _convert_rows(rows, convert, 'invoicesData')


def to_payroll_records(
    rows: Optional[Iterable[Any]],
    tz: TimezoneLike = None,
) -> List[PayrollRecord]:
    """Convert raw payroll rows."""
    cols = PAYROLL_COLUMNS

    def convert(row: Mapping[str, Any]) -> PayrollRecord:
        return PayrollRecord(
            type=_text(row, cols['type']),
            amount=_amount(row, cols['amount']),
            dueDate=_day(row, cols['dueDate'], tz),
            description=_text(row, cols['description']),
        )

    return _convert_rows(rows, convert, 'payrollData')


def to_financial_resources(
    rows: Optional[Iterable[Any]],
    tz: TimezoneLike = None,
) -> List[FinancialResource]:
    """Convert raw financial resource rows."""
    cols = RESOURCE_COLUMNS

    def convert(row: Mapping[str, Any]) -> FinancialResource:
        return FinancialResource(
            account=_text(row, cols['account']),
            available=_amount(row, cols['available']),
            owing=_amount(row, cols['owing']),
            limit=_amount(row, cols['limit']),
            dueDate=_day(row, cols['dueDate'], tz),
        )

    return _convert_rows(rows, convert, 'financialResources')


def load_dataset(dataset: Optional[DashboardDataset], tz: TimezoneLike = None) -> TypedDataset:
    """
    Convert every dataset of a DashboardDataset into typed records.

    Args:
        dataset: Raw datasets; None gives an empty TypedDataset.
        tz: Reporting timezone used when a date string carries an offset.

    Returns:
        TypedDataset: Typed records per dataset.
    """
    if dataset is None:
        return TypedDataset()

    typed = TypedDataset(
        performance=to_performance_records(dataset.performanceData, tz),
        invoices=to_invoice_records(dataset.invoicesData, tz),
        payroll=to_payroll_records(dataset.payrollData, tz),
        resources=to_financial_resources(dataset.financialResources, tz),
        network_terms=list(dataset.networkTerms or []),
    )
    logger.info(
        f"Loaded dataset: {len(typed.performance)} performance, {len(typed.invoices)} invoice, "
        f"{len(typed.payroll)} payroll, {len(typed.resources)} resource rows"
    )
    return typed


# =============================================================================
# CSV Exports
# =============================================================================


def records_from_csv(source: Union[BinaryIO, io.StringIO, str]) -> List[Dict[str, Any]]:
    """
    Read a sheet exported as CSV into raw row dicts.

    Every column is read as a string so currency formatting and date layouts
    survive for the parsers; blank cells become None. Column headers are
    stripped of surrounding whitespace.

    Args:
        source: File object (bytes or text) or a path.

    Returns:
        List[Dict[str, Any]]: One dict per data row.
    """
    if hasattr(source, 'read'):
        content = source.read()
        if isinstance(content, bytes):
            file_like = io.BytesIO(content)
        else:
            file_like = io.StringIO(content)
    else:
        file_like = source

    df = pd.read_csv(file_like, dtype=str)
    df.columns = df.columns.str.strip()
    df = df.astype(object).where(pd.notna(df), None)

    logger.info(f"Parsed CSV with {len(df)} rows and {len(df.columns)} columns")
    return df.to_dict(orient='records')


__all__ = [
    'PERFORMANCE_COLUMNS',
    'INVOICE_COLUMNS',
    'PAYROLL_COLUMNS',
    'RESOURCE_COLUMNS',
    'TypedDataset',
    'to_performance_records',
    'to_invoice_records',
    'to_payroll_records',
    'to_financial_resources',
    'load_dataset',
    'records_from_csv',
]
