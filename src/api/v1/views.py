"""API views for account manager metrics.

Every metric read goes through ``metrics.access.authorize`` (inside the
service functions); the views only parse parameters and shape responses.
"""
import logging

from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.permissions import IsManagement
from api.v1.serializers import (
    AccountManagerSerializer,
    MetricMonthlySerializer,
    MetricsQuerySerializer,
)
from core.export import rows_to_csv_response
from metrics.access import AccessError, Forbidden
from metrics.months import format_month
from metrics.services import active_account_managers, build_dashboard, get_metrics

logger = logging.getLogger("dashboard")


class ScopedMetricsAPIView(APIView):
    """Base view for endpoints gated by the metrics access policy.

    Authentication is checked by the policy itself (anonymous requests have
    no principal and are refused with 401), so DRF lets every request
    through to the handler.
    """

    permission_classes = [permissions.AllowAny]

    def get_scope_kwargs(self, request) -> dict:
        query = MetricsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return query.scope_kwargs()

    def handle_exception(self, exc):
        if isinstance(exc, AccessError):
            if isinstance(exc, Forbidden):
                logger.error(
                    "Metrics access refused for misconfigured principal",
                    extra={"path": self.request.path},
                )
            return Response({"detail": exc.detail}, status=exc.status_code)
        return super().handle_exception(exc)


class MetricsAPIView(ScopedMetricsAPIView):
    """
    GET /api/v1/metrics/?account_manager_id=&account_manager_ids=&start=&end=
    Metric rows the caller may read, ordered by month then account manager.
    """

    def get(self, request):
        kwargs = self.get_scope_kwargs(request)
        result = get_metrics(getattr(request, "principal", None), **kwargs)
        rows = MetricMonthlySerializer(result["rows"], many=True).data
        return Response({"rows": rows})


class MetricsExportAPIView(ScopedMetricsAPIView):
    """GET /api/v1/metrics/export/ -- same scope as the list, as CSV."""

    COLUMNS = [
        (lambda row: row.account_manager.name, "Account Manager"),
        (lambda row: format_month(row.month), "Month"),
        ("net_retention", "Net Retention %"),
        ("gross_retention", "Gross Retention %"),
        ("renewal_premium", "Renewal Premium"),
        ("lost_premium", "Lost Premium"),
        ("new_biz_premium", "New Biz Premium"),
        ("policy_count_start", "Policy Count Start"),
        ("policy_count_end", "Policy Count End"),
    ]

    def get(self, request):
        kwargs = self.get_scope_kwargs(request)
        result = get_metrics(getattr(request, "principal", None), **kwargs)
        return rows_to_csv_response(result["rows"], self.COLUMNS, "metrics")


class DashboardAPIView(ScopedMetricsAPIView):
    """
    GET /api/v1/dashboard/?account_manager_ids=&start=&end=
    Latest snapshots, month-over-month deltas and, for several account
    managers, the combined snapshot and retention comparison series.
    """

    def get(self, request):
        kwargs = self.get_scope_kwargs(request)
        payload = build_dashboard(getattr(request, "principal", None), **kwargs)
        payload["rows"] = MetricMonthlySerializer(payload["rows"], many=True).data
        return Response(payload)


class AccountManagerListAPIView(APIView):
    """GET /api/v1/account-managers/ -- active account managers for the selector."""

    permission_classes = [permissions.IsAuthenticated, IsManagement]

    def get(self, request):
        serializer = AccountManagerSerializer(active_account_managers(), many=True)
        return Response(serializer.data)
