from django.contrib import admin
from django.contrib.auth import admin as auth_admin

from gala_voting.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    list_display = ["username", "email", "name", "is_staff", "is_active"]
    search_fields = ["username", "email", "name"]
