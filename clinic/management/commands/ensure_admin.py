# clinic/management/commands/ensure_admin.py
import os

from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from clinic.models import Admin


class Command(BaseCommand):
    help = "Ensure the back office admin exists (ADMIN_USERNAME / ADMIN_PASSWORD). Idempotent."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=os.getenv("ADMIN_USERNAME", "admin"))
        parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD", "admin123"))

    def handle(self, *args, **opts):
        username = opts["username"].strip()
        admin, created = Admin.objects.get_or_create(
            username=username,
            defaults={"password": make_password(opts["password"]), "is_active": True,
                      "is_staff": True, "is_superuser": True},
        )
        if created:
            self.stdout.write(self.style.SUCCESS(f"created admin: {admin.username}"))
        else:
            # Existing passwords are never overwritten
            self.stdout.write(f"admin already exists: {admin.username}")
