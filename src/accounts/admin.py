from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin configuration for the custom User model.

    Linking an account-manager user to its ``AccountManager`` record happens
    here; the change applies on the user's next request.
    """

    # ------------------------------------------------------------------
    # List view
    # ------------------------------------------------------------------
    list_display = (
        "email",
        "name",
        "role",
        "account_manager",
        "is_active",
        "is_staff",
        "last_login",
    )
    list_filter = ("role", "is_active", "is_staff", "is_superuser")
    search_fields = ("email", "name", "account_manager__name")
    list_select_related = ("account_manager",)
    ordering = ("email",)
    autocomplete_fields = ("account_manager",)
    actions = ("link_to_matching_account_manager",)

    # ------------------------------------------------------------------
    # Detail / edit view
    # ------------------------------------------------------------------
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("name",)}),
        (
            "Role and access",
            {
                "fields": (
                    "role",
                    "account_manager",
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    # ------------------------------------------------------------------
    # Add user view
    # ------------------------------------------------------------------
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "name", "role", "account_manager", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("date_joined", "last_login")

    @admin.action(description="Link to the account manager with the same email")
    def link_to_matching_account_manager(self, request, queryset):
        from metrics.services import find_entity_by_email

        linked = 0
        for user in queryset.filter(role=User.Role.AM):
            account_manager = find_entity_by_email(user.email)
            if account_manager and user.account_manager_id != account_manager.pk:
                user.account_manager = account_manager
                user.save(update_fields=["account_manager"])
                linked += 1
        self.message_user(request, f"{linked} user(s) linked.")
