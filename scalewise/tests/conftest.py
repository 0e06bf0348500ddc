"""
Pytest Configuration and Shared Fixtures for Scalewise Backend Tests.

This module provides fixtures and configuration for all backend tests, supporting:
- Async test execution with pytest-asyncio
- Mock database pool fixtures for testing the PostgreSQL key-value store
- Mock Slack WebhookClient for the weekly digest job
- Sample spreadsheet rows in the loose shapes the data source returns
- Explicit Settings instances so tests never depend on the environment

Sample performance data (March 2024):
- ACA - Banner: 10 days, $1,000 spend / $1,500 revenue per day (half the rows
  spelled "Banner Edge"), buyer Mike -> SCALE_AGGRESSIVE
- Suited - Solar: 8 days, $10,000 spend / $10,500 revenue per day, buyer
  Sara -> SCALE_BACK
- Hoth - Medicare: 4 days, $100 spend / $200 revenue per day, buyer Edwin
  -> LEARNING
- LG - Roofing: 2 days, excluded combination
"""

from datetime import date, timedelta
from typing import Any, Dict, Generator, List
from unittest.mock import AsyncMock, Mock, patch

import pytest

from scalewise.core.config import Settings
from scalewise.models import DashboardDataset, PerformanceRecord
from scalewise.services.ingestion import to_performance_records
from scalewise.services.kv_store import InMemoryKeyValueStore


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - integration: Marks integration tests requiring external services
    """
    config.addinivalue_line(
        'markers',
        'integration: marks tests requiring external service connectivity'
    )


# ============================================================
# SETTINGS FIXTURE
# ============================================================

SLACK_TEST_WEBHOOK = 'https://hooks.slack.com/services/T000/B000/XXXX'


@pytest.fixture
def test_settings() -> Settings:
    """
    Provide an explicit Settings instance with production defaults.

    The database is disabled and a dummy Slack webhook is configured.

    Usage:
        def test_with_settings(test_settings):
            settings = test_settings.model_copy(update={'projection_horizon_days': 7})
    """
    return Settings(
        database_url=None,
        slack_webhook_url=SLACK_TEST_WEBHOOK,
        reporting_timezone='America/Los_Angeles',
    )


# ============================================================
# DATABASE MOCK FIXTURES
# ============================================================

@pytest.fixture
def mock_db_pool() -> AsyncMock:
    """
    Create a mock asyncpg connection pool for testing database operations.

    Provides pool.acquire() as an async context manager yielding a mock
    connection with execute, fetch, fetchrow and fetchval.

    Usage:
        async def test_query(mock_db_pool):
            conn = mock_db_pool.acquire.return_value.__aenter__.return_value
            conn.fetchrow.return_value = {'value': '{"a": 1}'}
    """
    pool = AsyncMock()

    conn = AsyncMock()
    conn.execute = AsyncMock(return_value='INSERT 0 1')
    conn.fetch = AsyncMock(return_value=[])
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetchval = AsyncMock(return_value=None)

    acquire_context = AsyncMock()
    acquire_context.__aenter__ = AsyncMock(return_value=conn)
    acquire_context.__aexit__ = AsyncMock(return_value=None)
    pool.acquire = Mock(return_value=acquire_context)

    pool.close = AsyncMock(return_value=None)

    return pool


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    """Fresh in-memory key-value store per test."""
    return InMemoryKeyValueStore()


# ============================================================
# SLACK MOCK FIXTURE
# ============================================================

@pytest.fixture
def mock_slack_client() -> Generator[Mock, None, None]:
    """
    Mock Slack WebhookClient for testing the weekly digest.

    client.send(blocks=...) returns a response with status_code=200.
    Patches 'scalewise.jobs.slack_digest.WebhookClient' so every
    instantiation inside the job uses the mock.
    """
    client = Mock()

    response = Mock()
    response.status_code = 200
    response.body = 'ok'

    client.send = Mock(return_value=response)

    with patch('scalewise.jobs.slack_digest.WebhookClient', return_value=client):
        yield client


# ============================================================
# SAMPLE DATA FIXTURES
# ============================================================

MARCH_1 = date(2024, 3, 1)


def _us_date(day: date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


@pytest.fixture
def raw_performance_rows() -> List[Dict[str, Any]]:
    """
    Performance rows as the spreadsheet API returns them.

    Dates alternate between M/D/YYYY and ISO, amounts are currency strings
    or plain numbers.
    """
    rows: List[Dict[str, Any]] = []

    for offset in range(10):
        day = MARCH_1 + timedelta(days=offset)
        rows.append({
            'Date': _us_date(day) if offset % 2 == 0 else day.isoformat(),
            'Network': 'ACA',
            'Offer': 'Banner' if offset < 5 else 'Banner Edge',
            'Media Buyer': 'Mike',
            'Ad Spend': '$1,000.00',
            'Total Revenue': '$1,500.00',
        })

    for offset in range(8):
        day = MARCH_1 + timedelta(days=offset)
        rows.append({
            'Date': _us_date(day),
            'Network': 'Suited',
            'Offer': 'Solar',
            'Media Buyer': 'Sara',
            'Ad Spend': 10000,
            'Total Revenue': '$10,500',
        })

    for offset in range(4):
        day = MARCH_1 + timedelta(days=offset)
        rows.append({
            'Date': day.isoformat(),
            'Network': 'Hoth',
            'Offer': 'Medicare',
            'Media Buyer': 'Edwin',
            'Ad Spend': '$100',
            'Total Revenue': '$200',
        })

    for offset in range(2):
        day = MARCH_1 + timedelta(days=offset)
        rows.append({
            'Date': _us_date(day),
            'Network': 'LG',
            'Offer': 'Roofing',
            'Media Buyer': 'Mike',
            'Ad Spend': '$50',
            'Total Revenue': '$20',
        })

    return rows


@pytest.fixture
def performance_records(raw_performance_rows: List[Dict[str, Any]]) -> List[PerformanceRecord]:
    """Typed records converted from raw_performance_rows."""
    return to_performance_records(raw_performance_rows)


@pytest.fixture
def sample_dataset(raw_performance_rows: List[Dict[str, Any]]) -> DashboardDataset:
    """
    Full dashboard dataset.

    Cash: $50,000 in "Cash in Bank". Credit: Amex with $8,000 owing due
    2024-01-20. Invoices: $5,000 overdue (due 2024-01-01), $10,000 upcoming
    (due 2024-01-10), one paid and one undated. Payroll: $12,000 on 2024-01-15.
    """
    return DashboardDataset(
        performanceData=raw_performance_rows,
        invoicesData=[
            {'Network': 'ACA', 'Amount': '$5,000', 'DueDate': '2024-01-01', 'Status': 'Unpaid'},
            {'Network': 'Suited', 'Amount': '$10,000', 'DueDate': '1/10/2024', 'Status': ''},
            {'Network': 'Hoth', 'Amount': '$7,500', 'DueDate': '2024-01-12', 'Status': 'Paid'},
            {'Network': 'LG', 'Amount': '$2,000', 'DueDate': 'TBD'},
        ],
        payrollData=[
            {'Type': 'Payroll', 'Amount': '$12,000', 'DueDate': '2024-01-15', 'Description': 'Biweekly payroll'},
        ],
        financialResources=[
            {'Account Name': 'Cash in Bank', 'Available': '$50,000'},
            {'Account Name': 'Amex Platinum', 'Available': '$42,000', 'Owing': '$8,000',
             'Limit': '$50,000', 'DueDate': '2024-01-20'},
        ],
        networkTerms=None,
    )
