import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AccountManager",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("name", models.CharField(max_length=150, verbose_name="name")),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email")),
                ("active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
            ],
            options={
                "verbose_name": "account manager",
                "verbose_name_plural": "account managers",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="MetricMonthly",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("month", models.DateField(db_index=True, verbose_name="month")),
                ("net_retention", models.DecimalField(decimal_places=2, default=0, max_digits=7, verbose_name="net retention %")),
                ("gross_retention", models.DecimalField(decimal_places=2, default=0, max_digits=7, verbose_name="gross retention %")),
                ("renewal_premium", models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name="renewal premium")),
                ("lost_premium", models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name="lost premium")),
                ("new_biz_premium", models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name="new business premium")),
                ("policy_count_start", models.IntegerField(default=0, verbose_name="policies at start")),
                ("policy_count_end", models.IntegerField(default=0, verbose_name="policies at end")),
                (
                    "account_manager",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="metrics",
                        to="metrics.accountmanager",
                        verbose_name="account manager",
                    ),
                ),
            ],
            options={
                "verbose_name": "monthly metric",
                "verbose_name_plural": "monthly metrics",
                "ordering": ["month", "account_manager_id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("account_manager", "month"),
                        name="uniq_metric_account_manager_month",
                    ),
                ],
            },
        ),
    ]
