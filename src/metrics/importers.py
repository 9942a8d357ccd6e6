"""
Bulk import of monthly metrics from Excel using openpyxl.

The first worksheet is read; its first row is the header. Columns are
matched by name so that both the camelCase export of the reporting team
and the older title-case sheets are accepted.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import openpyxl
from django.db import transaction

from metrics.models import AccountManager, MetricMonthly
from metrics.months import parse_month

logger = logging.getLogger("dashboard")

# ---------------------------------------------------------------------------
# Accepted header names per model field (first match wins)
# ---------------------------------------------------------------------------
COLUMN_ALIASES = {
    "am_name": ("amName", "AM"),
    "am_email": ("amEmail", "email", "Email"),
    "month": ("month", "Month"),
    "net_retention": ("netRetention", "NetRetention"),
    "gross_retention": ("grossRetention", "GrossRetention"),
    "renewal_premium": ("renewalPremium", "RenewalPremium"),
    "lost_premium": ("lostPremium", "LostPremium"),
    "new_biz_premium": ("newBizPremium", "NewBizPremium"),
    "policy_count_start": ("policyCountStart", "PolicyStart"),
    "policy_count_end": ("policyCountEnd", "PolicyEnd"),
}

DECIMAL_FIELDS = (
    "net_retention",
    "gross_retention",
    "renewal_premium",
    "lost_premium",
    "new_biz_premium",
)
INTEGER_FIELDS = ("policy_count_start", "policy_count_end")


def _column_index(header) -> dict:
    positions = {str(name).strip(): idx for idx, name in enumerate(header) if name is not None}
    index = {}
    for field, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in positions:
                index[field] = positions[alias]
                break
    return index


def _cell(row, index, field):
    position = index.get(field)
    if position is None or position >= len(row):
        return None
    value = row[position]
    if isinstance(value, str):
        value = value.strip()
    return value if value != "" else None


# Upper bound of ``IntegerField`` on every supported database.
MAX_COUNT = 2147483647


def _to_decimal(value, field) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid number for {field}: {value!r}.")
    if not number.is_finite():
        raise ValueError(f"Invalid number for {field}: {value!r}.")

    model_field = MetricMonthly._meta.get_field(field)
    step = Decimal(1).scaleb(-model_field.decimal_places)
    limit = Decimal(10) ** (model_field.max_digits - model_field.decimal_places)
    if abs(number) < limit:
        number = number.quantize(step, rounding=ROUND_HALF_UP)
    if abs(number) >= limit:
        raise ValueError(f"Value out of range for {field}: {value!r}.")
    return number


def _to_int(value, field) -> int:
    if value is None:
        return 0
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid count for {field}: {value!r}.")
    if not number.is_finite():
        raise ValueError(f"Invalid count for {field}: {value!r}.")
    if not 0 <= number <= MAX_COUNT:
        raise ValueError(f"Count out of range for {field}: {value!r}.")
    return int(number)


def _resolve_account_manager(name, email):
    if email:
        am = AccountManager.objects.filter(email__iexact=str(email)).first()
        if am:
            return am
    if name:
        return AccountManager.objects.filter(name__iexact=str(name)).first()
    return None


def parse_metric_row(row, index) -> dict:
    """Extract and validate one spreadsheet row into model field values."""
    values = {"month": parse_month(_cell(row, index, "month"))}
    for field in DECIMAL_FIELDS:
        values[field] = _to_decimal(_cell(row, index, field), field)
    for field in INTEGER_FIELDS:
        values[field] = _to_int(_cell(row, index, field), field)
    return values


def import_metrics_from_excel(file) -> dict:
    """
    Upsert ``MetricMonthly`` rows from an Excel (.xlsx) file.

    Rows without an account manager or a month are skipped. Unknown account
    managers and unparseable values are reported per line.

    Returns a dict with counts::

        {"created": int, "updated": int, "skipped": int, "errors": int,
         "error_details": list[str]}
    """
    wb = openpyxl.load_workbook(file, read_only=True, data_only=True)
    ws = wb.worksheets[0]

    created = 0
    updated = 0
    skipped = 0
    errors = 0
    error_details: list[str] = []

    try:
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None) or ()
        index = _column_index(header)

        for row_idx, row in enumerate(rows, start=2):
            name = _cell(row, index, "am_name")
            email = _cell(row, index, "am_email")
            month = _cell(row, index, "month")
            if not (name or email) or month is None:
                skipped += 1
                continue

            try:
                account_manager = _resolve_account_manager(name, email)
                if account_manager is None:
                    raise ValueError(f"Unknown account manager {name or email!r}.")

                values = parse_metric_row(row, index)
                month_value = values.pop("month")

                with transaction.atomic():
                    _, was_created = MetricMonthly.objects.update_or_create(
                        account_manager=account_manager,
                        month=month_value,
                        defaults=values,
                    )
            except ValueError as exc:
                errors += 1
                detail = f"Line {row_idx}: {exc}"
                error_details.append(detail)
                logger.warning("Metrics import - %s", detail)
                continue

            if was_created:
                created += 1
            else:
                updated += 1
    finally:
        wb.close()

    logger.info(
        "Metrics import finished: %d created, %d updated, %d skipped, %d error(s).",
        created, updated, skipped, errors,
    )

    return {
        "created": created,
        "updated": updated,
        "skipped": skipped,
        "errors": errors,
        "error_details": error_details,
    }
