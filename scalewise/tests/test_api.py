"""
Pytest test module for the FastAPI endpoints.

Settings and the key-value store are swapped through
app.dependency_overrides, so no environment or database is needed. The
client is created without entering the lifespan, so init_db never runs.

Test Classes:
- TestHealth: health and root endpoints
- TestOfferEndpoints: /offers/*
- TestMediaBuyerEndpoints: /media-buyers/*
- TestCashEndpoints: /cash/*
- TestNoteEndpoints: /notes/{key}
- TestJobEndpoints: /jobs/weekly-digest
"""

from typing import Generator
import pytest
from fastapi.testclient import TestClient

from scalewise.core.dependencies import get_settings_dependency, get_store_dependency
from scalewise.core.exceptions import StoreUnavailableError
from scalewise.main import app


@pytest.fixture
def client(test_settings, memory_store) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    app.dependency_overrides[get_store_dependency] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def dataset_json(sample_dataset):
    return sample_dataset.model_dump(mode='json')


# =============================================================================
# Test Class: TestHealth
# =============================================================================

class TestHealth:

    def test_health(self, client) -> None:
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy'}

    def test_root(self, client) -> None:
        body = client.get('/').json()

        assert body['name'] == 'Scalewise API'
        assert body['docs'] == '/docs'


# =============================================================================
# Test Class: TestOfferEndpoints
# =============================================================================

class TestOfferEndpoints:

    def test_offer_performance(self, client, dataset_json) -> None:
        response = client.post('/offers/performance', json={'dataset': dataset_json})

        assert response.status_code == 200
        body = response.json()
        assert [o['offerKey'] for o in body['offers']] == ['ACA - Banner', 'Suited - Solar', 'Hoth - Medicare']
        assert body['offers'][0]['recommendation']['action'] == 'SCALE_AGGRESSIVE'
        assert body['insights']['scaleUpCount'] == 1
        assert body['priorities']['scaleBack'][0]['offerKey'] == 'Suited - Solar'

    def test_offer_performance_with_window(self, client, dataset_json) -> None:
        response = client.post('/offers/performance', json={
            'dataset': dataset_json,
            'startDate': '2024-03-01',
            'endDate': '2024-03-02',
            'includeBuyerBreakdown': True,
        })

        body = response.json()
        assert body['startDate'] == '2024-03-01'
        banner = next(o for o in body['offers'] if o['offerKey'] == 'ACA - Banner')
        assert banner['daysActive'] == 2
        assert banner['recommendation']['action'] == 'INSUFFICIENT_DATA'
        assert banner['buyerBreakdown']['buyers'][0]['mediaBuyer'] == 'Mike'

    def test_missing_dataset_gives_empty_report(self, client) -> None:
        response = client.post('/offers/performance', json={'dataset': {'performanceData': None}})

        assert response.status_code == 200
        assert response.json()['offers'] == []

    def test_recommendation(self, client) -> None:
        response = client.post('/offers/recommendation', json={
            'roi': 50, 'daysActive': 10, 'consistency': 80, 'marginTrend': 5, 'totalMargin': 5000,
        })

        assert response.status_code == 200
        assert response.json()['action'] == 'SCALE_AGGRESSIVE'
        assert response.json()['label'] == 'Scale Aggressive'

    def test_recommendation_rejects_out_of_range_consistency(self, client) -> None:
        response = client.post('/offers/recommendation', json={'consistency': 150})

        assert response.status_code == 422

    def test_media_buyer_breakdown(self, client, dataset_json) -> None:
        response = client.post('/offers/media-buyers', json={'dataset': dataset_json, 'offerKey': 'Suited - Solar'})

        body = response.json()
        assert body['offerKey'] == 'Suited - Solar'
        assert [b['mediaBuyer'] for b in body['buyers']] == ['Sara']

    def test_media_buyer_breakdown_requires_key(self, client, dataset_json) -> None:
        response = client.post('/offers/media-buyers', json={'dataset': dataset_json})

        assert response.status_code == 422

    @pytest.mark.parametrize('period,count', [('day', 10), ('month', 1)])
    def test_totals(self, client, dataset_json, period, count) -> None:
        response = client.post(f'/offers/totals?period={period}', json={'dataset': dataset_json})

        assert response.status_code == 200
        assert len(response.json()) == count

    def test_totals_rejects_unknown_period(self, client, dataset_json) -> None:
        response = client.post('/offers/totals?period=week', json={'dataset': dataset_json})

        assert response.status_code == 422


# =============================================================================
# Test Class: TestMediaBuyerEndpoints
# =============================================================================

class TestMediaBuyerEndpoints:

    def test_performance(self, client, dataset_json) -> None:
        body = client.post('/media-buyers/performance', json={'dataset': dataset_json}).json()

        assert [b['mediaBuyer'] for b in body] == ['Mike', 'Sara', 'Edwin']
        assert body[2]['isActive'] is False

    def test_active(self, client, dataset_json) -> None:
        response = client.post('/media-buyers/active', json={'dataset': dataset_json, 'endDate': '2024-03-10'})

        assert response.json() == ['Mike', 'Sara']


# =============================================================================
# Test Class: TestCashEndpoints
# =============================================================================

class TestCashEndpoints:

    def test_projection(self, client, dataset_json) -> None:
        response = client.post('/cash/projection', json={
            'dataset': dataset_json, 'anchorDate': '2024-01-05', 'horizonDays': 30,
        })

        assert response.status_code == 200
        body = response.json()
        assert len(body['days']) == 30
        assert body['startingBalance'] == 50000.0
        assert body['endingBalance'] == 40000.0
        assert body['invoices']['overdueTotal'] == 5000.0

    def test_projection_with_average_spend(self, client, dataset_json) -> None:
        response = client.post('/cash/projection', json={
            'dataset': dataset_json, 'anchorDate': '2024-01-05', 'horizonDays': 2,
            'includeAverageSpend': True,
        })

        body = response.json()
        # Mar 4-10: Banner 7 x 1,000, Solar 5 x 10,000, Medicare 1 x 100
        assert body['dailySpend'] == pytest.approx(57100 / 7)
        assert body['days'][0]['totalOutflows'] == pytest.approx(body['dailySpend'])

    def test_projection_rejects_huge_horizon(self, client) -> None:
        response = client.post('/cash/projection', json={'horizonDays': 1000})

        assert response.status_code == 422

    def test_resources(self, client, dataset_json) -> None:
        body = client.post('/cash/resources', json=dataset_json).json()

        assert body['totalCash'] == 50000.0
        assert body['creditOwing'] == 8000.0
        assert body['totalAvailable'] == 92000.0


# =============================================================================
# Test Class: TestNoteEndpoints
# =============================================================================

class TestNoteEndpoints:

    def test_round_trip(self, client) -> None:
        put = client.put('/notes/reviewed', json={'value': ['ACA - Banner']})
        get = client.get('/notes/reviewed')

        assert put.status_code == 200
        assert get.json() == {'key': 'reviewed', 'value': ['ACA - Banner']}

    def test_unknown_note_is_404(self, client) -> None:
        assert client.get('/notes/nothing').status_code == 404

    def test_delete(self, client) -> None:
        client.put('/notes/temp', json={'value': 1})

        assert client.delete('/notes/temp').status_code == 200
        assert client.delete('/notes/temp').status_code == 404

    def test_store_outage_is_503(self, client, memory_store) -> None:
        async def broken_load(key, default=None):
            raise StoreUnavailableError('down')

        memory_store.load = broken_load

        response = client.get('/notes/anything')

        assert response.status_code == 503


# =============================================================================
# Test Class: TestJobEndpoints
# =============================================================================

class TestJobEndpoints:

    def test_weekly_digest(self, client, dataset_json, mock_slack_client) -> None:
        response = client.post('/jobs/weekly-digest', json={'dataset': dataset_json, 'endDate': '2024-03-07'})

        assert response.status_code == 200
        assert response.json()['success'] is True
        mock_slack_client.send.assert_called_once()

    def test_weekly_digest_delivery_failure_is_502(self, client, dataset_json, mock_slack_client) -> None:
        mock_slack_client.send.return_value.status_code = 403
        mock_slack_client.send.return_value.body = 'invalid_token'

        response = client.post('/jobs/weekly-digest', json={'dataset': dataset_json, 'endDate': '2024-03-07'})

        assert response.status_code == 502
