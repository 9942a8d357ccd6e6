from datetime import date
from decimal import Decimal

import pytest

from accounts.models import User
from accounts.services import reset_identity_resolver
from metrics.models import AccountManager, MetricMonthly


@pytest.fixture(autouse=True)
def fresh_identity_resolver():
    reset_identity_resolver()
    yield
    reset_identity_resolver()


@pytest.fixture
def andrea(db):
    return AccountManager.objects.create(name="Andrea", email="andrea@benchmark.com")


@pytest.fixture
def mitchell(db):
    return AccountManager.objects.create(name="Mitchell", email="mitchell@benchmark.com")


@pytest.fixture
def retired_am(db):
    return AccountManager.objects.create(
        name="Retired",
        email="retired@benchmark.com",
        active=False,
    )


@pytest.fixture
def management_user(db):
    return User.objects.create_user(
        email="vik@benchmarkbroker.com",
        password="testpass123",
        name="Vik",
        role=User.Role.MANAGEMENT,
    )


@pytest.fixture
def am_user(andrea):
    return User.objects.create_user(
        email="andrea@benchmark.com",
        password="testpass123",
        name="Andrea",
        role=User.Role.AM,
        account_manager=andrea,
    )


@pytest.fixture
def unlinked_am_user(db):
    return User.objects.create_user(
        email="newhire@benchmark.com",
        password="testpass123",
        name="New Hire",
        role=User.Role.AM,
    )


def make_metric(account_manager, month, **overrides):
    values = {
        "net_retention": Decimal("95.00"),
        "gross_retention": Decimal("90.00"),
        "renewal_premium": Decimal("100000.00"),
        "lost_premium": Decimal("5000.00"),
        "new_biz_premium": Decimal("10000.00"),
        "policy_count_start": 100,
        "policy_count_end": 102,
    }
    values.update(overrides)
    return MetricMonthly.objects.create(
        account_manager=account_manager,
        month=month,
        **values,
    )


@pytest.fixture
def metric_factory(db):
    return make_metric


@pytest.fixture
def metric_rows(andrea, mitchell):
    """Two months for Andrea and Mitchell."""
    return [
        make_metric(andrea, date(2025, 11, 1)),
        make_metric(
            andrea,
            date(2025, 12, 1),
            net_retention=Decimal("97.50"),
            gross_retention=Decimal("91.00"),
            lost_premium=Decimal("4000.00"),
        ),
        make_metric(
            mitchell,
            date(2025, 11, 1),
            net_retention=Decimal("88.00"),
            gross_retention=Decimal("85.00"),
        ),
        make_metric(
            mitchell,
            date(2025, 12, 1),
            net_retention=Decimal("86.00"),
            gross_retention=Decimal("84.00"),
            renewal_premium=Decimal("50000.00"),
            lost_premium=Decimal("6000.00"),
            new_biz_premium=Decimal("2000.00"),
            policy_count_start=40,
            policy_count_end=41,
        ),
    ]
