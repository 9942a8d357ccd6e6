from datetime import date
from decimal import Decimal

import pytest

from accounts.principals import AccountManagerPrincipal, ManagementPrincipal
from metrics.access import NotLinked, Unauthenticated
from metrics.models import MetricMonthly
from metrics.services import (
    active_account_managers,
    available_months,
    build_dashboard,
    find_entity,
    find_entity_by_email,
    get_metrics,
    query_rows,
)

MANAGEMENT = ManagementPrincipal(email="vik@benchmarkbroker.com", display_name="Vik")


@pytest.mark.django_db
class TestSelectors:
    def test_find_entity(self, andrea):
        assert find_entity(andrea.pk) == andrea
        assert find_entity(andrea.pk + 100) is None

    def test_find_entity_by_email_ignores_case(self, andrea):
        assert find_entity_by_email("  Andrea@Benchmark.COM ") == andrea
        assert find_entity_by_email("") is None
        assert find_entity_by_email("nobody@benchmark.com") is None

    def test_active_account_managers_skip_inactive(self, andrea, mitchell, retired_am):
        assert list(active_account_managers()) == [andrea, mitchell]

    def test_query_rows_orders_by_month_then_account_manager(self, metric_rows, andrea, mitchell):
        rows = list(query_rows([mitchell.pk, andrea.pk]))

        assert [(r.month, r.account_manager_id) for r in rows] == [
            (date(2025, 11, 1), andrea.pk),
            (date(2025, 11, 1), mitchell.pk),
            (date(2025, 12, 1), andrea.pk),
            (date(2025, 12, 1), mitchell.pk),
        ]

    def test_query_rows_without_ids_is_empty(self, metric_rows):
        assert list(query_rows([])) == []

    def test_available_months_are_distinct_and_sorted(self, metric_rows, andrea, mitchell):
        assert available_months([andrea.pk, mitchell.pk]) == [date(2025, 11, 1), date(2025, 12, 1)]


@pytest.mark.django_db
class TestGetMetrics:
    def test_account_manager_gets_only_own_rows(self, metric_rows, andrea, mitchell):
        principal = AccountManagerPrincipal(email=andrea.email, linked_entity_id=andrea.pk)

        result = get_metrics(principal, entity_ids=[mitchell.pk])

        assert {row.account_manager_id for row in result["rows"]} == {andrea.pk}
        assert len(result["rows"]) == 2

    def test_month_range_is_inclusive(self, metric_rows, metric_factory, andrea):
        metric_factory(andrea, date(2026, 1, 1))

        result = get_metrics(MANAGEMENT, entity_id=andrea.pk, start_month="2025-12", end_month="2026-01")

        assert [row.month for row in result["rows"]] == [date(2025, 12, 1), date(2026, 1, 1)]

    def test_empty_management_selection_returns_no_rows(self, metric_rows):
        assert get_metrics(MANAGEMENT, entity_ids=[]) == {"rows": []}

    def test_unlinked_account_manager_is_refused(self, metric_rows):
        with pytest.raises(NotLinked):
            get_metrics(AccountManagerPrincipal(email="newhire@benchmark.com"))

    def test_anonymous_is_refused(self):
        with pytest.raises(Unauthenticated):
            get_metrics(None)


@pytest.mark.django_db
class TestBuildDashboard:
    def test_management_multi_select(self, metric_rows, andrea, mitchell):
        payload = build_dashboard(MANAGEMENT, entity_ids=[mitchell.pk, andrea.pk])

        assert payload["role"] == "MANAGEMENT"
        assert payload["scope"] == [mitchell.pk, andrea.pk]
        assert payload["selected_names"] == ["Mitchell", "Andrea"]
        assert payload["available_months"] == ["2025-11", "2025-12"]
        assert len(payload["rows"]) == 4

        combined = payload["combined"]
        assert combined["month"] == "2025-12"
        assert combined["net_retention"] == Decimal("91.75")
        assert combined["renewal_premium"] == Decimal("150000.00")
        assert combined["lost_premium"] == Decimal("10000.00")

        by_name = {entity["name"]: entity for entity in payload["entities"]}
        assert by_name["Andrea"]["latest"]["net_retention"] == Decimal("97.50")
        assert by_name["Andrea"]["deltas"]["net_retention"] == {
            "value": Decimal("2.50"),
            "favorable": True,
        }
        assert by_name["Andrea"]["deltas"]["lost_premium"]["favorable"] is True
        assert by_name["Mitchell"]["deltas"]["net_retention"]["favorable"] is False

        assert [point["month"] for point in payload["comparison"]] == ["2025-11", "2025-12"]
        assert payload["comparison"][1]["Andrea - Net"] == Decimal("97.50")

    def test_combined_month_matches_first_listed_account_manager(self, andrea, mitchell, metric_factory):
        metric_factory(andrea, date(2025, 11, 1))
        metric_factory(mitchell, date(2025, 10, 1))
        metric_factory(mitchell, date(2025, 12, 1))

        payload = build_dashboard(MANAGEMENT, entity_ids=[mitchell.pk, andrea.pk])

        assert payload["entities"][0]["name"] == "Andrea"
        assert payload["entities"][0]["latest"]["month"] == "2025-11"
        assert payload["combined"]["month"] == "2025-11"

    def test_account_manager_sees_no_combined_block(self, metric_rows, andrea):
        principal = AccountManagerPrincipal(email=andrea.email, linked_entity_id=andrea.pk)

        payload = build_dashboard(principal)

        assert payload["role"] == "AM"
        assert payload["scope"] == [andrea.pk]
        assert payload["combined"] is None
        assert payload["comparison"] == []
        assert len(payload["entities"]) == 1

    def test_single_month_in_range_has_no_deltas(self, metric_rows, andrea):
        payload = build_dashboard(MANAGEMENT, entity_id=andrea.pk, start_month="2025-12")

        entity = payload["entities"][0]
        assert entity["latest"]["month"] == "2025-12"
        assert entity["deltas"] is None
        # Months offered in the picker ignore the selected range.
        assert payload["available_months"] == ["2025-11", "2025-12"]

    def test_account_manager_without_rows(self, andrea):
        payload = build_dashboard(MANAGEMENT, entity_id=andrea.pk)

        assert payload["entities"] == [
            {
                "id": andrea.pk,
                "name": "Andrea",
                "email": "andrea@benchmark.com",
                "latest": None,
                "deltas": None,
            }
        ]
        assert MetricMonthly.objects.count() == 0
