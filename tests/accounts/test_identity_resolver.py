import pytest
from django.test import override_settings

from accounts.models import User
from accounts.principals import AccountManagerPrincipal, ManagementPrincipal, Principal
from accounts.services import (
    IdentityResolver,
    ManagementAllowList,
    SignInFailure,
    derive_email,
    get_identity_resolver,
    principal_from_user,
)


@pytest.fixture
def resolver():
    return IdentityResolver(ManagementAllowList(["Vik@BenchmarkBroker.com"]))


class TestDeriveEmail:
    def test_primary_claim_wins(self):
        assert derive_email({"email": "A@B.com", "upn": "other@b.com"}) == "a@b.com"

    def test_falls_back_to_later_claims(self):
        assert derive_email({"email": "", "preferred_username": "Tara@Benchmark.com"}) == "tara@benchmark.com"

    def test_values_without_at_sign_are_ignored(self):
        assert derive_email({"email": "not-an-address", "upn": "daniel@benchmark.com"}) == "daniel@benchmark.com"

    def test_no_usable_claim(self):
        assert derive_email({"name": "Nobody"}) is None


@pytest.mark.django_db
class TestSignIn:
    def test_fallback_claim_is_used_and_lowercased(self, resolver):
        user, principal = resolver.sign_in({"upn": "Robert@Benchmark.COM", "name": "Robert"})

        assert user.email == "robert@benchmark.com"
        assert principal.email == "robert@benchmark.com"
        assert principal.display_name == "Robert"

    def test_missing_email_is_refused_without_creating_a_user(self, resolver):
        with pytest.raises(SignInFailure):
            resolver.sign_in({"name": "Anonymous"})

        assert User.objects.count() == 0

    def test_allow_listed_address_becomes_management(self, resolver, andrea):
        user, principal = resolver.sign_in({"email": "vik@benchmarkbroker.com"})

        assert isinstance(principal, ManagementPrincipal)
        assert principal.role == "MANAGEMENT"
        assert user.role == User.Role.MANAGEMENT
        assert user.account_manager is None

    def test_account_manager_is_linked_by_email(self, resolver, andrea):
        user, principal = resolver.sign_in({"email": "ANDREA@benchmark.com"}, name="Andrea")

        assert isinstance(principal, AccountManagerPrincipal)
        assert principal.linked_entity_id == andrea.pk
        assert user.account_manager == andrea

    def test_account_manager_without_record_is_unlinked(self, resolver):
        user, principal = resolver.sign_in({"email": "newhire@benchmark.com"})

        assert principal.role == "AM"
        assert principal.linked_entity_id is None
        assert not principal.is_linked
        assert user.account_manager_id is None

    def test_new_users_cannot_use_a_password(self, resolver):
        user, _ = resolver.sign_in({"email": "newhire@benchmark.com"})

        assert not user.has_usable_password()

    def test_sign_in_upserts_and_recomputes_role(self, resolver, am_user, andrea):
        am_user.role = User.Role.MANAGEMENT
        am_user.account_manager = None
        am_user.save()

        user, principal = resolver.sign_in({"email": "andrea@benchmark.com", "name": "Andrea B."})

        assert user.pk == am_user.pk
        assert User.objects.count() == 1
        assert user.role == User.Role.AM
        assert user.account_manager == andrea
        assert user.name == "Andrea B."
        assert principal.linked_entity_id == andrea.pk


@pytest.mark.django_db
class TestRefresh:
    def test_unknown_user_is_an_unlinked_account_manager(self, resolver):
        principal = resolver.refresh("ghost@benchmark.com")

        assert principal == AccountManagerPrincipal(email="ghost@benchmark.com", linked_entity_id=None)

    def test_refresh_picks_up_relinking(self, resolver, unlinked_am_user, mitchell):
        assert resolver.refresh(unlinked_am_user.email).linked_entity_id is None

        unlinked_am_user.account_manager = mitchell
        unlinked_am_user.save()

        assert resolver.refresh("NewHire@benchmark.com").linked_entity_id == mitchell.pk

    def test_refresh_reads_role_from_the_store(self, resolver, management_user):
        principal = resolver.refresh(management_user.email)

        assert isinstance(principal, ManagementPrincipal)
        assert principal.display_name == "Vik"


@pytest.mark.django_db
def test_unknown_stored_role_yields_a_principal_without_role(management_user):
    management_user.role = "AUDITOR"

    principal = principal_from_user(management_user)

    assert type(principal) is Principal
    assert principal.role is None


@pytest.mark.django_db
def test_process_resolver_uses_settings_allow_list():
    _, principal = get_identity_resolver().sign_in({"email": "wesley@benchmarkbroker.com"})

    assert principal.role == "MANAGEMENT"


@pytest.mark.django_db
def test_process_resolver_follows_settings_changes():
    with override_settings(MANAGEMENT_EMAILS=["tara@benchmark.com"]):
        _, principal = get_identity_resolver().sign_in({"email": "tara@benchmark.com"})

    assert principal.role == "MANAGEMENT"
    assert "tara@benchmark.com" not in get_identity_resolver().allow_list
