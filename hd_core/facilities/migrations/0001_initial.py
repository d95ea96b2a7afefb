import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Facility",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255, unique=True)),
                (
                    "facility_type",
                    models.CharField(
                        choices=[
                            ("Hospital", "Hospital"),
                            ("Primary Health Center", "Primary Health Center"),
                            ("Community Health Center", "Community Health Center"),
                            ("Sub-district Hospital", "Sub-district Hospital"),
                            ("District Hospital", "District Hospital"),
                            ("Medical College", "Medical College"),
                            ("Department", "Department"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("address", models.CharField(max_length=255)),
                ("city", models.CharField(max_length=128)),
                ("district", models.CharField(db_index=True, max_length=128)),
                ("state", models.CharField(db_index=True, max_length=128)),
                (
                    "pincode",
                    models.CharField(
                        max_length=6,
                        validators=[django.core.validators.RegexValidator("^[0-9]{6}$", "Please add a valid pincode")],
                    ),
                ),
                ("contact_phone", models.CharField(max_length=32)),
                ("contact_email", models.EmailField(max_length=254)),
            ],
            options={
                "db_table": "facilities_facility",
                "indexes": [models.Index(fields=["state", "district"], name="facility_state_district_idx")],
            },
        ),
        migrations.CreateModel(
            name="Department",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("head_name", models.CharField(blank=True, default="", max_length=255)),
                ("head_designation", models.CharField(blank=True, default="", max_length=255)),
                ("head_contact_number", models.CharField(blank=True, default="", max_length=32)),
                ("head_email", models.EmailField(blank=True, default="", max_length=254)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "facility",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="owned_departments",
                        to="facilities.facility",
                    ),
                ),
            ],
            options={
                "db_table": "facilities_department",
                "constraints": [
                    models.UniqueConstraint(fields=("name", "facility"), name="uq_department_name_facility"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FacilityDepartmentLink",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("linked_at", models.DateTimeField(auto_now_add=True)),
                (
                    "department",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="facility_link",
                        to="facilities.department",
                    ),
                ),
                (
                    "facility",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="department_links",
                        to="facilities.facility",
                    ),
                ),
            ],
            options={
                "db_table": "facilities_facility_department",
                "ordering": ["id"],
            },
        ),
    ]
