from decouple import config
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from apps.accounts.models import Role


class Command(BaseCommand):
    help = "Create or update the dashboard super admin from ADMIN_EMAIL / ADMIN_PASSWORD."

    def add_arguments(self, parser):
        parser.add_argument("--name", default="Super Admin")

    def handle(self, *args, **options):
        if not settings.DEBUG and not config("ALLOW_CREATE_ADMIN_IN_PROD", default=False, cast=bool):
            raise CommandError("Production lock: set ALLOW_CREATE_ADMIN_IN_PROD=True to run this.")

        email = config("ADMIN_EMAIL", default=None)
        password = config("ADMIN_PASSWORD", default=None)
        if not email or not password:
            raise CommandError("Missing ADMIN_EMAIL or ADMIN_PASSWORD env vars.")

        User = get_user_model()
        user, created = User.objects.get_or_create(
            email=User.objects.normalize_email(email),
            defaults={"name": options["name"]},
        )

        user.role = Role.SUPER_ADMIN
        user.is_staff = True
        user.is_superuser = True
        user.is_active = True
        user.set_password(password)
        user.save()

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created super admin: {user.email}"))
        else:
            self.stdout.write(self.style.WARNING(f"Updated super admin: {user.email}"))
