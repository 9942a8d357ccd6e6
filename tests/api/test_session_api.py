import pytest


@pytest.mark.django_db
def test_me_requires_a_session(client):
    response = client.get("/api/v1/auth/me/")

    assert response.status_code == 401


@pytest.mark.django_db
def test_me_reports_linked_account_manager(client, am_user, andrea):
    client.force_login(am_user)

    response = client.get("/api/v1/auth/me/")

    assert response.status_code == 200
    assert response.json() == {
        "email": "andrea@benchmark.com",
        "name": "Andrea",
        "role": "AM",
        "account_manager_id": andrea.pk,
    }


@pytest.mark.django_db
def test_me_reflects_role_changes_without_new_sign_in(client, am_user):
    client.force_login(am_user)
    am_user.role = "MANAGEMENT"
    am_user.account_manager = None
    am_user.save()

    payload = client.get("/api/v1/auth/me/").json()

    assert payload["role"] == "MANAGEMENT"
    assert payload["account_manager_id"] is None


@pytest.mark.django_db
def test_csrf_endpoint_sets_cookie(client):
    response = client.get("/api/v1/auth/csrf/")

    assert response.status_code == 200
    assert response.json()["csrfToken"]
    assert "csrftoken" in response.cookies


@pytest.mark.django_db
def test_logout_ends_the_session(client, management_user):
    client.force_login(management_user)

    response = client.post("/api/v1/auth/logout/")

    assert response.status_code == 204
    assert client.get("/api/v1/auth/me/").status_code == 401


@pytest.mark.django_db
def test_dashboard_page_sends_anonymous_visitors_to_sign_in(client):
    response = client.get("/dashboard/")

    assert response.status_code == 302
    assert response["Location"] == "/accounts/microsoft/login/?next=/dashboard/"


@pytest.mark.django_db
def test_dashboard_page_redirects_signed_in_users_to_payload(client, management_user):
    client.force_login(management_user)

    response = client.get("/")

    assert response.status_code == 302
    assert response["Location"] == "/api/v1/dashboard/"
