"""
Unit tests for the derived views.

Covers date filtering, statistics, the two search filters, range
statistics and the duplicate lookup.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from dailyledger.core.exceptions import ValidationError
from dailyledger.core.types import DuplicateScope
from dailyledger.ledger.aggregation import (
    amount_text,
    compute_stats,
    filter_by_date,
    filter_history,
    filter_summary,
    find_duplicate,
    range_stats,
    summarize_agents,
)

from factories import DAY, make_payment

APR_30 = datetime(2024, 4, 30, 15, 0, tzinfo=timezone.utc)
MAY_02 = datetime(2024, 5, 2, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def scenario():
    """X pays twice, Y once, all on the same business date."""
    return [
        make_payment("p1", "X", "100", "a1"),
        make_payment("p2", "X", "50", "a2"),
        make_payment("p3", "Y", "30", "b1"),
    ]


@pytest.fixture
def week():
    return [
        make_payment("p1", "Liam", "100.50", "7001", MAY_02),
        make_payment("p2", "Teffy", "200", "7002"),
        make_payment("p3", "Liam", "40", "8003"),
        make_payment("p4", "Herlan", "10", "9004", APR_30),
    ]


class TestComputeStats:
    """Tests for compute_stats."""

    def test_scenario_totals(self, scenario):
        stats = compute_stats(scenario)

        assert stats.total == Decimal("180")
        assert stats.profit == Decimal("5.4")
        assert stats.net_remainder == Decimal("174.6")

    def test_scenario_per_agent(self, scenario):
        stats = compute_stats(scenario)

        assert stats.per_agent["X"].total == Decimal("150")
        assert stats.per_agent["X"].count == 2
        assert stats.per_agent["X"].references == ("a1", "a2")
        assert stats.per_agent["Y"].total == Decimal("30")
        assert stats.per_agent["Y"].count == 1
        assert stats.per_agent["X"].last_reference == "a2"

    def test_groups_add_up(self, week):
        stats = compute_stats(week)

        assert sum(s.total for s in stats.per_agent.values()) == stats.total
        assert sum(s.count for s in stats.per_agent.values()) == len(week)
        assert stats.payment_count == len(week)

    def test_fee_relations(self, week):
        stats = compute_stats(week)

        assert stats.net_remainder == stats.total - stats.profit
        assert stats.profit / Decimal("0.03") == stats.total

    def test_custom_fee_rate(self, scenario):
        stats = compute_stats(scenario, fee_rate=Decimal("0.05"))
        assert stats.profit == Decimal("9")

    def test_empty(self):
        stats = compute_stats([])

        assert stats.total == Decimal("0")
        assert stats.profit == Decimal("0")
        assert stats.per_agent == {}

    def test_recomputing_is_idempotent(self, week):
        snapshot = tuple(week)

        assert compute_stats(snapshot) == compute_stats(snapshot)
        assert filter_history(snapshot, "liam") == filter_history(snapshot, "liam")
        assert snapshot == tuple(week)


class TestFilterByDate:
    """Tests for filter_by_date."""

    def test_exact_business_date(self, week):
        assert [p.id for p in filter_by_date(week, DAY)] == ["p2", "p3"]
        assert [p.id for p in filter_by_date(week, "2024-05-02")] == ["p1"]

    def test_no_date_is_noop(self, week):
        assert filter_by_date(week, None) == week
        assert filter_by_date(week, "") == week

    def test_empty_when_nothing_matches(self, week):
        assert filter_by_date(week, "2023-01-01") == []

    def test_uses_business_clock(self):
        # 02:00 UTC on May 2nd is still May 1st at UTC-4
        late = make_payment("late", "X", "1", "0001", datetime(2024, 5, 2, 2, 0, tzinfo=timezone.utc))

        assert filter_by_date([late], DAY) == [late]
        assert filter_by_date([late], "2024-05-02") == []


class TestSearchFilters:
    """Tests for the history and summary filters."""

    def test_history_matches_agent_case_insensitive(self, week):
        assert {p.id for p in filter_history(week, "LIAM")} == {"p1", "p3"}

    def test_history_matches_reference(self, week):
        assert [p.id for p in filter_history(week, "900")] == ["p4"]

    def test_history_matches_amount_text(self, week):
        # 100.50 is searched as "100.5"
        assert [p.id for p in filter_history(week, "100.5")] == ["p1"]
        assert [p.id for p in filter_history(week, "200")] == ["p2"]

    def test_history_empty_term_keeps_all(self, week):
        assert filter_history(week, "") == week

    def test_summary_does_not_match_amount(self, week):
        assert filter_summary(week, "200") == []

    def test_summary_matches_agent_or_reference(self, week):
        assert {p.id for p in filter_summary(week, "teffy")} == {"p2"}
        assert {p.id for p in filter_summary(week, "800")} == {"p3"}

    def test_references_are_case_insensitive(self):
        payments = [make_payment("p1", "X", "1", "ABc9")]

        assert filter_history(payments, "abc") == payments
        assert filter_summary(payments, "ABC") == payments


class TestSummarizeAgents:
    """Tests for summarize_agents."""

    def test_sorted_by_total_descending(self, scenario):
        stats = compute_stats(scenario + [make_payment("p4", "Z", "500", "c1")])
        rows = summarize_agents(stats.per_agent)

        assert [agent for agent, _ in rows] == ["Z", "X", "Y"]

    def test_matches_any_reference(self, scenario):
        rows = summarize_agents(compute_stats(scenario).per_agent, "a2")
        assert [agent for agent, _ in rows] == ["X"]

    def test_matches_agent_name(self, scenario):
        rows = summarize_agents(compute_stats(scenario).per_agent, "y")
        assert [agent for agent, _ in rows] == ["Y"]

    def test_ties_keep_first_seen_order(self):
        payments = [
            make_payment("p1", "B", "10", "1111"),
            make_payment("p2", "A", "10", "2222"),
        ]
        rows = summarize_agents(compute_stats(payments).per_agent)

        assert [agent for agent, _ in rows] == ["B", "A"]


class TestRangeStats:
    """Tests for range_stats."""

    def test_inclusive_bounds(self, week):
        stats = range_stats(week, "2024-04-30", "2024-05-01")

        assert stats.total == Decimal("250")
        assert stats.per_agent["Herlan"].count == 1
        assert stats.per_agent["Liam"].total == Decimal("40")
        assert "Herlan" in stats.per_agent
        assert stats.net_remainder == stats.total - stats.profit

    def test_single_day(self, week):
        stats = range_stats(week, "2024-05-02", "2024-05-02")

        assert stats.total == Decimal("100.50")
        assert list(stats.per_agent) == ["Liam"]

    def test_no_reference_lists(self, week):
        stats = range_stats(week, "2024-04-01", "2024-05-31")
        assert not hasattr(stats.per_agent["Liam"], "references")

    def test_reversed_range_raises(self, week):
        with pytest.raises(ValidationError, match="after end date"):
            range_stats(week, "2024-05-02", "2024-05-01")

    def test_malformed_date_raises(self, week):
        with pytest.raises(ValidationError):
            range_stats(week, "May 1", "2024-05-01")


class TestFindDuplicate:
    """Tests for find_duplicate."""

    def test_finds_exact_match(self, week):
        assert find_duplicate(week, "7002").id == "p2"

    def test_case_sensitive(self):
        payments = [make_payment("p1", "X", "1", "ab12")]
        assert find_duplicate(payments, "AB12") is None

    def test_excludes_record_being_edited(self, week):
        assert find_duplicate(week, "7002", exclude_id="p2") is None

    def test_returns_first_in_store_order(self):
        payments = [
            make_payment("new", "X", "1", "5555"),
            make_payment("old", "Y", "1", "5555"),
        ]
        assert find_duplicate(payments, "5555").id == "new"
        assert find_duplicate(payments, "5555", exclude_id="new").id == "old"

    def test_business_day_scope(self, week):
        assert (
            find_duplicate(week, "9004", scope=DuplicateScope.BUSINESS_DAY, on_date=DAY) is None
        )
        assert (
            find_duplicate(week, "9004", scope=DuplicateScope.BUSINESS_DAY, on_date="2024-04-30").id
            == "p4"
        )
        assert find_duplicate(week, "9004", scope=DuplicateScope.GLOBAL, on_date=DAY).id == "p4"


class TestAmountText:
    @pytest.mark.parametrize(
        "amount,expected",
        [("100", "100"), ("100.00", "100"), ("100.50", "100.5"), ("0.25", "0.25"), ("0", "0")],
    )
    def test_plain_form(self, amount, expected):
        assert amount_text(Decimal(amount)) == expected
