"""
Enumeration definitions for the Scalewise backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization compatibility
with Pydantic models, enabling automatic serialization/deserialization in API responses.
"""

from enum import Enum


class ScalingAction(str, Enum):
    """
    Scaling recommendation categories for an offer.

    Produced by the ordered decision list in services/scaling.py. Two of the
    categories (DATA_REVIEW and MAINTAIN) are reachable through two different
    rules; the rule that fired is visible in the recommendation's reason.

    - INSUFFICIENT_DATA: Fewer than three active days
    - DATA_REVIEW: Numbers look wrong or unstable, needs a human look
    - LEARNING: Three to six active days
    - LOW_VOLUME: Established but under $500 total margin
    - SCALE_BACK: Poor ROI or negative margin
    - SCALE_AGGRESSIVE: High ROI, consistent, not declining
    - SCALE_CAUTIOUS: Good ROI with some consistency or growth
    - MAINTAIN: Moderate performance
    """
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    DATA_REVIEW = "DATA_REVIEW"
    LEARNING = "LEARNING"
    LOW_VOLUME = "LOW_VOLUME"
    SCALE_BACK = "SCALE_BACK"
    SCALE_AGGRESSIVE = "SCALE_AGGRESSIVE"
    SCALE_CAUTIOUS = "SCALE_CAUTIOUS"
    MAINTAIN = "MAINTAIN"


class LineItemCategory(str, Enum):
    """
    Origin of a cash projection line item.

    - INVOICE: Network payment expected from an unpaid invoice (inflow)
    - PAYROLL: Payroll or contractor payment (outflow)
    - CREDIT_CARD: Credit card payment (outflow)
    - AD_SPEND: Projected average daily ad spend (outflow)
    - OTHER: Anything supplied directly by a caller
    """
    INVOICE = "invoice"
    PAYROLL = "payroll"
    CREDIT_CARD = "credit_card"
    AD_SPEND = "ad_spend"
    OTHER = "other"


class AccountType(str, Enum):
    """Financial resource classification used by the cash position summary."""
    CASH = "cash"
    CREDIT = "credit"
    OTHER = "other"


class InvoiceStatus(str, Enum):
    """
    Invoice payment status as entered in the invoices sheet.

    Rows with no status are treated as unpaid.
    """
    PAID = "Paid"
    UNPAID = "Unpaid"


class TrendDirection(str, Enum):
    """Direction of a first-half vs second-half trend, for display."""
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


__all__ = [
    'ScalingAction',
    'LineItemCategory',
    'AccountType',
    'InvoiceStatus',
    'TrendDirection',
]
