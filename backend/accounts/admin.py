from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from accounts.models import User, Profile


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    fields = ("full_name", "phone", "user_type")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin panel for custom User model"""

    inlines = [ProfileInline]

    list_display = [
        "username",
        "email",
        "is_active",
        "is_staff",
        "date_joined",
    ]

    search_fields = [
        "username",
        "email",
        "profile__full_name",
        "profile__phone",
    ]

    ordering = ("username",)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "full_name", "phone", "user_type", "created_at"]
    list_filter = ["user_type"]
    search_fields = ["user__username", "full_name", "phone"]
    readonly_fields = ["created_at", "updated_at"]
