import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("facilities", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("super-admin", "Super admin"),
                            ("state-admin", "State admin"),
                            ("district-admin", "District admin"),
                            ("hospital-admin", "Hospital admin"),
                            ("department-user", "Department user"),
                        ],
                        db_index=True,
                        default="department-user",
                        max_length=32,
                    ),
                ),
                ("district", models.CharField(blank=True, db_index=True, default="", max_length=128)),
                ("state", models.CharField(blank=True, db_index=True, default="", max_length=128)),
                (
                    "department",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="user_profiles",
                        to="facilities.department",
                    ),
                ),
                (
                    "facility",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="user_profiles",
                        to="facilities.facility",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hd_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "iam_user_profile",
                "indexes": [models.Index(fields=["role", "state", "district"], name="iam_profile_role_geo_idx")],
            },
        ),
    ]
