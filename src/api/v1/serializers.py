"""Serializers for the dashboard API v1."""
from rest_framework import serializers

from metrics.models import AccountManager, MetricMonthly
from metrics.months import format_month, parse_month


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------

class MonthField(serializers.Field):
    """``YYYY-MM`` label <-> first-of-month ``date``."""

    default_error_messages = {
        "invalid": "Invalid month (expected YYYY-MM).",
    }

    def to_internal_value(self, data):
        try:
            return parse_month(data)
        except ValueError:
            self.fail("invalid")

    def to_representation(self, value):
        return format_month(value)


class IdListField(serializers.Field):
    """Comma-separated account manager ids.

    Entries that are not positive integers are ignored, matching how the
    multi-select in the frontend has always been parsed.
    """

    def to_internal_value(self, data):
        if isinstance(data, (list, tuple)):
            parts = data
        else:
            parts = str(data).split(",")
        ids = []
        for part in parts:
            try:
                value = int(str(part).strip())
            except ValueError:
                continue
            if value > 0:
                ids.append(value)
        return list(dict.fromkeys(ids))

    def to_representation(self, value):
        return ",".join(str(v) for v in value)


class MetricsQuerySerializer(serializers.Serializer):
    """Validate the scope and month range query parameters."""

    account_manager_id = serializers.IntegerField(required=False, min_value=1)
    account_manager_ids = IdListField(required=False)
    start = MonthField(required=False)
    end = MonthField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and start > end:
            raise serializers.ValidationError({"end": "End month must not be before start month."})
        return attrs

    def scope_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "entity_id": data.get("account_manager_id"),
            "entity_ids": data.get("account_manager_ids"),
            "start_month": data.get("start"),
            "end_month": data.get("end"),
        }


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

class AccountManagerSerializer(serializers.ModelSerializer):
    """Read serializer for AccountManager model."""

    class Meta:
        model = AccountManager
        fields = ["id", "name", "email", "active"]
        read_only_fields = fields


class MetricMonthlySerializer(serializers.ModelSerializer):
    """Read serializer for MetricMonthly model."""

    month = MonthField(read_only=True)
    account_manager_name = serializers.CharField(
        source="account_manager.name", read_only=True,
    )

    class Meta:
        model = MetricMonthly
        fields = [
            "id", "account_manager_id", "account_manager_name", "month",
            "net_retention", "gross_retention",
            "renewal_premium", "lost_premium", "new_biz_premium",
            "policy_count_start", "policy_count_end",
        ]
        read_only_fields = fields
