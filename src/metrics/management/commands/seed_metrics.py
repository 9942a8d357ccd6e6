"""Seed database with demo account managers, users and monthly metrics."""
import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from metrics.months import parse_month


class Command(BaseCommand):
    help = "Seed account managers, dashboard users and random monthly metrics"

    AM_NAMES = ["Andrea", "Mitchell", "Tara", "Kimberly", "Daniel", "Robert", "Divit"]
    MANAGEMENT_USERS = [
        {"name": "Maggie Manager", "email": "maggie.manager@example.com"},
        {"name": "Oscar Oversight", "email": "oscar.management@example.com"},
    ]
    DEFAULT_MONTHS = ["2025-10", "2025-11", "2025-12"]

    def add_arguments(self, parser):
        parser.add_argument("--flush", action="store_true", help="Delete existing metrics and users first")
        parser.add_argument(
            "--months",
            nargs="+",
            default=self.DEFAULT_MONTHS,
            help="Months (YYYY-MM) to generate metrics for.",
        )
        parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")

    def handle(self, *args, **options):
        rng = random.Random(options["seed"])
        months = [parse_month(m) for m in options["months"]]

        with transaction.atomic():
            if options["flush"]:
                self.stdout.write("Flushing existing data...")
                self._flush()

            self.stdout.write("Seeding data...")
            self._create_management_users()
            managers = self._create_account_managers()
            rows = self._create_metrics(managers, months, rng)

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete: {len(self.MANAGEMENT_USERS)} management users, "
            f"{len(managers)} account managers, {rows} metric rows"
        ))

    def _flush(self):
        from accounts.models import User
        from metrics.models import MetricMonthly

        MetricMonthly.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def _create_management_users(self):
        from accounts.models import User

        for data in self.MANAGEMENT_USERS:
            User.objects.update_or_create(
                email=data["email"],
                defaults={"name": data["name"], "role": User.Role.MANAGEMENT, "account_manager": None},
            )

    def _create_account_managers(self):
        from accounts.models import User
        from metrics.models import AccountManager

        managers = []
        for name in self.AM_NAMES:
            email = f"{name.lower()}@benchmark.com"
            am, _ = AccountManager.objects.update_or_create(
                email=email,
                defaults={"name": name, "active": True},
            )
            User.objects.update_or_create(
                email=email,
                defaults={"name": name, "role": User.Role.AM, "account_manager": am},
            )
            managers.append(am)
        return managers

    def _create_metrics(self, managers, months, rng):
        from metrics.models import MetricMonthly

        count = 0
        for am in managers:
            for month in months:
                MetricMonthly.objects.update_or_create(
                    account_manager=am,
                    month=month,
                    defaults={
                        "net_retention": Decimal(str(round(92 + rng.random() * 4, 2))),
                        "gross_retention": Decimal(str(round(95 + rng.random() * 3, 2))),
                        "renewal_premium": Decimal(round(50000 + rng.random() * 20000)),
                        "lost_premium": Decimal(round(5000 + rng.random() * 5000)),
                        "new_biz_premium": Decimal(round(15000 + rng.random() * 7000)),
                        "policy_count_start": 120 + rng.randrange(30),
                        "policy_count_end": 120 + rng.randrange(30),
                    },
                )
                count += 1
        return count
