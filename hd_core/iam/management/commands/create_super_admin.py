# backend/hd_core/iam/management/commands/create_super_admin.py

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from hd_core.iam.models import UserProfile, UserRole


class Command(BaseCommand):
    help = "Create (or promote) a super-admin login. Idempotent on email."

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", required=True)
        parser.add_argument("--name", default="Super Admin")

    @transaction.atomic
    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        if len(options["password"]) < 6:
            raise CommandError("Password must be at least 6 characters.")

        User = get_user_model()
        user, user_created = User.objects.get_or_create(username=email, defaults={"email": email})
        if user_created:
            user.set_password(options["password"])
            user.save(update_fields=["password"])

        profile, _ = UserProfile.objects.update_or_create(
            user=user,
            defaults={
                "name": options["name"],
                "role": UserRole.SUPER_ADMIN,
                "facility": None,
                "department": None,
                "district": "",
                "state": "",
            },
        )

        verb = "Created" if user_created else "Promoted"
        self.stdout.write(self.style.SUCCESS(f"{verb} super-admin {email} (profile {profile.id})"))
