"""Admin configuration for the metrics app."""
from django.contrib import admin

from metrics.models import AccountManager, MetricMonthly


@admin.register(AccountManager)
class AccountManagerAdmin(admin.ModelAdmin):
    """Admin for the AccountManager model."""

    list_display = ("name", "email", "active", "created_at")
    list_filter = ("active",)
    search_fields = ("name", "email")
    readonly_fields = ("created_at", "updated_at")
    ordering = ["name"]
    actions = ("activate", "deactivate")

    @admin.action(description="Activate selected account managers")
    def activate(self, request, queryset):
        updated = queryset.update(active=True)
        self.message_user(request, f"{updated} account manager(s) activated.")

    @admin.action(description="Deactivate selected account managers")
    def deactivate(self, request, queryset):
        updated = queryset.update(active=False)
        self.message_user(request, f"{updated} account manager(s) deactivated.")


@admin.register(MetricMonthly)
class MetricMonthlyAdmin(admin.ModelAdmin):
    """Admin for the MetricMonthly model."""

    list_display = (
        "account_manager",
        "month",
        "net_retention",
        "gross_retention",
        "renewal_premium",
        "lost_premium",
        "new_biz_premium",
        "policy_count_start",
        "policy_count_end",
    )
    list_filter = ("account_manager", "month")
    search_fields = ("account_manager__name", "account_manager__email")
    list_select_related = ("account_manager",)
    date_hierarchy = "month"
    readonly_fields = ("created_at", "updated_at")
    ordering = ["-month", "account_manager__name"]
