"""Models for the metrics app."""
from django.db import models

from core.models import TimeStampedModel


class AccountManager(TimeStampedModel):
    """An account manager whose monthly book performance is tracked."""

    name = models.CharField("name", max_length=150)
    email = models.EmailField("email", unique=True)
    active = models.BooleanField("active", default=True, db_index=True)

    class Meta:
        verbose_name = "account manager"
        verbose_name_plural = "account managers"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)


class MetricMonthly(TimeStampedModel):
    """One month of book metrics for one account manager.

    ``month`` always holds the first day of the calendar month; rows are
    created or replaced by upsert on ``(account_manager, month)``.
    """

    account_manager = models.ForeignKey(
        AccountManager,
        on_delete=models.CASCADE,
        related_name="metrics",
        verbose_name="account manager",
    )
    month = models.DateField("month", db_index=True)

    # Retention (percent)
    net_retention = models.DecimalField(
        "net retention %",
        max_digits=7,
        decimal_places=2,
        default=0,
    )
    gross_retention = models.DecimalField(
        "gross retention %",
        max_digits=7,
        decimal_places=2,
        default=0,
    )

    # Premium flows
    renewal_premium = models.DecimalField(
        "renewal premium",
        max_digits=14,
        decimal_places=2,
        default=0,
    )
    lost_premium = models.DecimalField(
        "lost premium",
        max_digits=14,
        decimal_places=2,
        default=0,
    )
    new_biz_premium = models.DecimalField(
        "new business premium",
        max_digits=14,
        decimal_places=2,
        default=0,
    )

    # Policy counts
    policy_count_start = models.IntegerField("policies at start", default=0)
    policy_count_end = models.IntegerField("policies at end", default=0)

    class Meta:
        verbose_name = "monthly metric"
        verbose_name_plural = "monthly metrics"
        ordering = ["month", "account_manager_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["account_manager", "month"],
                name="uniq_metric_account_manager_month",
            ),
        ]

    def __str__(self):
        return f"{self.account_manager} - {self.month:%Y-%m}"

    def save(self, *args, **kwargs):
        if self.month is not None:
            self.month = self.month.replace(day=1)
        super().save(*args, **kwargs)
