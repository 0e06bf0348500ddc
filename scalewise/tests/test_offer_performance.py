"""
Pytest test module for the offer and media buyer performance pipeline.

Uses the conftest sample (March 2024):
- ACA - Banner (Banner + Banner Edge rows): margin $5,000, ROI 50 -> SCALE_AGGRESSIVE
- Suited - Solar: margin $4,000, ROI 5 -> SCALE_BACK
- Hoth - Medicare: margin $400 over 4 days -> LEARNING
- LG - Roofing: excluded combination

Test Classes:
- TestFiltering: date window and exclusions
- TestAnalyzeOffers: offer table contents and ordering
- TestOfferReport: insights and priorities
- TestMediaBuyers: per-buyer breakdown and cross-offer metrics
- TestPeriodTotals: daily and monthly summaries
"""

import logging
from datetime import date

import pytest

from scalewise.models import OfferPerformance, PerformanceRecord, ScalingAction, TrendDirection
from scalewise.services.offer_performance import (
    active_media_buyers,
    analyze_media_buyers,
    analyze_offers,
    build_offer_report,
    daily_totals,
    filter_by_date_range,
    is_excluded_offer,
    media_buyer_breakdown,
    monthly_totals,
    sort_offers,
)


# =============================================================================
# Test Class: TestFiltering
# =============================================================================

class TestFiltering:

    def test_no_bounds_keeps_everything(self) -> None:
        records = [PerformanceRecord(date=date(2024, 3, 1)), PerformanceRecord()]

        assert filter_by_date_range(records) == records

    def test_bounds_are_inclusive_and_drop_undated(self) -> None:
        records = [
            PerformanceRecord(date=date(2024, 3, 1)),
            PerformanceRecord(date=date(2024, 3, 5)),
            PerformanceRecord(date=date(2024, 3, 6)),
            PerformanceRecord(),
        ]

        kept = filter_by_date_range(records, date(2024, 3, 1), date(2024, 3, 5))

        assert [r.date for r in kept] == [date(2024, 3, 1), date(2024, 3, 5)]

    def test_none_records(self) -> None:
        assert filter_by_date_range(None, date(2024, 3, 1)) == []

    @pytest.mark.parametrize('key,excluded', [
        ('LG - Solar', True),
        (' - ', True),
        ('Unknown - Solar', True),
        ('ACA - Banner', False),
    ])
    def test_is_excluded_offer(self, test_settings, key, excluded) -> None:
        assert is_excluded_offer(key, test_settings) is excluded


# =============================================================================
# Test Class: TestAnalyzeOffers
# =============================================================================

class TestAnalyzeOffers:

    def test_offer_table(self, performance_records, test_settings) -> None:
        offers = analyze_offers(performance_records, settings=test_settings)

        assert [o.offerKey for o in offers] == ['ACA - Banner', 'Suited - Solar', 'Hoth - Medicare']

    def test_banner_edge_merged_and_scaled(self, performance_records, test_settings) -> None:
        banner = analyze_offers(performance_records, settings=test_settings)[0]

        assert banner.network == 'ACA'
        assert banner.offer == 'Banner'
        assert banner.totalMargin == 5000.0
        assert banner.daysActive == 10
        assert banner.metrics.roi == pytest.approx(50.0)
        assert banner.trendDirection == TrendDirection.FLAT
        assert banner.mediaBuyers == ['Mike']
        assert banner.recommendation.action == ScalingAction.SCALE_AGGRESSIVE

    def test_recommendations(self, performance_records, test_settings) -> None:
        offers = {o.offerKey: o for o in analyze_offers(performance_records, settings=test_settings)}

        assert offers['Suited - Solar'].recommendation.action == ScalingAction.SCALE_BACK
        assert offers['Hoth - Medicare'].recommendation.action == ScalingAction.LEARNING

    def test_window_changes_days_active(self, performance_records, test_settings) -> None:
        offers = analyze_offers(performance_records, date(2024, 3, 1), date(2024, 3, 2), test_settings)
        banner = next(o for o in offers if o.offerKey == 'ACA - Banner')

        assert banner.daysActive == 2
        assert banner.recommendation.action == ScalingAction.INSUFFICIENT_DATA

    def test_comment_revenue_is_split_out(self, test_settings) -> None:
        records = [
            PerformanceRecord(date=date(2024, 3, 1), network='ACA', offer='Auto',
                              mediaBuyer='Mike', adSpend=100, totalRevenue=180),
            PerformanceRecord(date=date(2024, 3, 1), network='ACA', offer='Auto',
                              mediaBuyer='Comment Rev', totalRevenue=40),
        ]

        offer = analyze_offers(records, settings=test_settings)[0]

        assert offer.totalRevenue == 220.0
        assert offer.commentRevenue == 40.0
        assert offer.adSpendMargin == 80.0
        assert offer.mediaBuyers == ['Comment Rev', 'Mike']

    def test_buyer_breakdown_is_optional(self, performance_records, test_settings) -> None:
        plain = analyze_offers(performance_records, settings=test_settings)
        detailed = analyze_offers(performance_records, settings=test_settings, include_buyer_breakdown=True)

        assert plain[0].buyerBreakdown is None
        assert detailed[0].buyerBreakdown.buyers[0].mediaBuyer == 'Mike'

    def test_unknown_offers_sort_last(self) -> None:
        offers = [
            OfferPerformance(offerKey='Unknown - Auto', totalMargin=9000),
            OfferPerformance(offerKey='ACA - Banner', totalMargin=10),
            OfferPerformance(offerKey='ACA - Unknown', totalMargin=50),
            OfferPerformance(offerKey='Suited - Solar', totalMargin=20),
        ]

        ordered = [o.offerKey for o in sort_offers(offers)]

        assert ordered == ['Suited - Solar', 'ACA - Banner', 'Unknown - Auto', 'ACA - Unknown']

    def test_blank_buyer_listed_as_unknown_in_offer_and_breakdown(self, test_settings) -> None:
        records = [
            PerformanceRecord(date=date(2024, 3, 1), network='ACA', offer='Auto',
                              mediaBuyer='Mike', adSpend=100, totalRevenue=180),
            PerformanceRecord(date=date(2024, 3, 2), network='ACA', offer='Auto',
                              mediaBuyer='', adSpend=50, totalRevenue=60),
        ]

        offer = analyze_offers(records, settings=test_settings, include_buyer_breakdown=True)[0]

        assert offer.mediaBuyers == ['Mike', 'Unknown']
        assert sorted(b.mediaBuyer for b in offer.buyerBreakdown.buyers) == offer.mediaBuyers

    def test_rows_without_network_or_offer_are_excluded(self, test_settings, caplog) -> None:
        """Blank labels give the ' - ' key, which is on the excluded list."""
        records = [
            PerformanceRecord(date=date(2024, 3, 1), adSpend=10, totalRevenue=30),
            PerformanceRecord(date=date(2024, 3, 1), network='ACA', offer='Banner',
                              adSpend=10, totalRevenue=30),
        ]

        with caplog.at_level(logging.INFO, logger='scalewise.services.offer_performance'):
            offers = analyze_offers(records, settings=test_settings)

        assert [o.offerKey for o in offers] == ['ACA - Banner']
        assert any('1 excluded combination' in message for message in caplog.messages)

    def test_empty_input(self, test_settings) -> None:
        assert analyze_offers(None, settings=test_settings) == []


# =============================================================================
# Test Class: TestOfferReport
# =============================================================================

class TestOfferReport:

    def test_insights(self, performance_records, test_settings) -> None:
        report = build_offer_report(performance_records, settings=test_settings)

        assert report.insights.scaleUpCount == 1
        assert report.insights.scaleBackCount == 1
        assert report.insights.learningCount == 1
        assert report.insights.totalPotentialGain == pytest.approx(150000.0)
        assert report.insights.totalAtRisk == pytest.approx(120000.0)

    def test_top_performer_by_score(self, performance_records, test_settings) -> None:
        """Medicare: ROI 100 -> 20, consistency 20, $100/day -> 2; Banner scores 40."""
        report = build_offer_report(performance_records, settings=test_settings)

        assert report.insights.topPerformer == 'Hoth - Medicare'
        assert report.insights.topPerformerScore == 42

    def test_priorities_and_window(self, performance_records, test_settings) -> None:
        start, end = date(2024, 3, 1), date(2024, 3, 31)

        report = build_offer_report(performance_records, start, end, test_settings)

        assert [o.offerKey for o in report.priorities.scaleAggressive] == ['ACA - Banner']
        assert [o.offerKey for o in report.priorities.scaleBack] == ['Suited - Solar']
        assert report.startDate == start
        assert report.endDate == end


# =============================================================================
# Test Class: TestMediaBuyers
# =============================================================================

class TestMediaBuyers:

    def test_breakdown_for_one_offer(self, performance_records, test_settings) -> None:
        breakdown = media_buyer_breakdown(performance_records, 'ACA - Banner', settings=test_settings)

        assert breakdown.offerKey == 'ACA - Banner'
        assert [b.mediaBuyer for b in breakdown.buyers] == ['Mike']
        assert breakdown.buyers[0].avgDailyMargin == pytest.approx(500.0)
        assert breakdown.profitableBuyers == 1
        assert breakdown.unprofitableBuyers == 0

    def test_breakdown_for_unknown_offer_is_empty(self, performance_records, test_settings) -> None:
        breakdown = media_buyer_breakdown(performance_records, 'Nope - Nothing', settings=test_settings)

        assert breakdown.buyers == []

    def test_analyze_media_buyers(self, performance_records, test_settings) -> None:
        buyers = analyze_media_buyers(performance_records, settings=test_settings)

        assert [b.mediaBuyer for b in buyers] == ['Mike', 'Sara', 'Edwin']
        mike = buyers[0]
        assert mike.offers == ['ACA - Banner', 'LG - Roofing']
        assert mike.metrics.totalMargin == pytest.approx(4940.0)
        assert mike.isActive is True

    def test_inactive_list_overrides_activity(self, performance_records, test_settings) -> None:
        buyers = {b.mediaBuyer: b for b in analyze_media_buyers(performance_records, settings=test_settings)}

        assert buyers['Edwin'].isActive is False

    def test_active_media_buyers_lookback(self, performance_records, test_settings) -> None:
        assert active_media_buyers(performance_records, date(2024, 3, 10), settings=test_settings) == ['Mike', 'Sara']
        assert active_media_buyers(performance_records, date(2024, 6, 1), settings=test_settings) == []
        assert active_media_buyers(
            performance_records, date(2024, 6, 1), lookback_days=120, settings=test_settings
        ) == ['Mike', 'Sara']


# =============================================================================
# Test Class: TestPeriodTotals
# =============================================================================

class TestPeriodTotals:

    def test_daily_totals(self, performance_records) -> None:
        days = daily_totals(performance_records)

        assert [d.period for d in days][:2] == ['2024-03-01', '2024-03-02']
        assert len(days) == 10
        first = days[0]
        # Banner + Solar + Medicare + Roofing on March 1
        assert first.totalSpend == pytest.approx(1000 + 10000 + 100 + 50)
        assert first.totalRevenue == pytest.approx(1500 + 10500 + 200 + 20)

    def test_monthly_totals(self, performance_records) -> None:
        months = monthly_totals(performance_records)

        assert [m.period for m in months] == ['2024-03']
        assert months[0].totalMargin == pytest.approx(5000 + 4000 + 400 - 60)

    def test_undated_sorts_last(self) -> None:
        records = [PerformanceRecord(adSpend=5), PerformanceRecord(date=date(2024, 3, 1), adSpend=1)]

        assert [d.period for d in daily_totals(records)] == ['2024-03-01', 'undated']
