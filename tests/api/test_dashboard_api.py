import pytest

DASHBOARD_URL = "/api/v1/dashboard/"


@pytest.mark.django_db
def test_management_dashboard_combines_selected_account_managers(
    client, management_user, andrea, mitchell, metric_rows,
):
    client.force_login(management_user)

    response = client.get(DASHBOARD_URL, {"account_manager_ids": f"{andrea.pk},{mitchell.pk}"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["role"] == "MANAGEMENT"
    assert payload["selected_names"] == ["Andrea", "Mitchell"]
    assert payload["available_months"] == ["2025-11", "2025-12"]
    assert len(payload["rows"]) == 4
    assert payload["combined"]["month"] == "2025-12"
    assert payload["combined"]["net_retention"] == 91.75
    assert payload["combined"]["policy_count_end"] == 143
    assert len(payload["comparison"]) == 2
    assert "Mitchell - Gross" in payload["comparison"][0]


@pytest.mark.django_db
def test_account_manager_dashboard_shows_own_book_with_deltas(client, am_user, andrea, mitchell, metric_rows):
    client.force_login(am_user)

    response = client.get(DASHBOARD_URL, {"account_manager_ids": f"{andrea.pk},{mitchell.pk}"})

    payload = response.json()
    assert payload["role"] == "AM"
    assert payload["scope"] == [andrea.pk]
    assert payload["combined"] is None
    [entity] = payload["entities"]
    assert entity["latest"]["net_retention"] == 97.5
    assert entity["deltas"]["net_retention"] == {"value": 2.5, "favorable": True}
    assert entity["deltas"]["lost_premium"] == {"value": -1000.0, "favorable": True}


@pytest.mark.django_db
def test_dashboard_refuses_unlinked_account_manager(client, unlinked_am_user):
    client.force_login(unlinked_am_user)

    assert client.get(DASHBOARD_URL).status_code == 403


@pytest.mark.django_db
def test_account_manager_list_is_reserved_to_management(client, am_user, management_user, andrea, mitchell, retired_am):
    client.force_login(am_user)
    assert client.get("/api/v1/account-managers/").status_code == 403

    client.force_login(management_user)
    response = client.get("/api/v1/account-managers/")

    assert response.status_code == 200
    assert [am["name"] for am in response.json()] == ["Andrea", "Mitchell"]


@pytest.mark.django_db
def test_api_responses_are_not_cached(client, management_user):
    client.force_login(management_user)

    response = client.get(DASHBOARD_URL)

    assert "no-store" in response["Cache-Control"]
