# backend/hd_core/facilities/management/commands/ensure_departments.py

from django.core.management.base import BaseCommand

from hd_core.common.scope import ROLE_SUPER_ADMIN, Caller
from hd_core.facilities.models import Facility
from hd_core.facilities.services import DepartmentService

DEFAULT_DEPARTMENTS = [
    {"name": "General Medicine", "description": "General Medicine Department"},
    {"name": "Pediatrics", "description": "Pediatrics Department"},
    {"name": "Obstetrics & Gynecology", "description": "OB-GYN Department"},
]


class Command(BaseCommand):
    help = "Give every facility without departments the default set (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--facility", help="Only this facility id.")

    def handle(self, *args, **options):
        system = Caller(user_id=None, role=ROLE_SUPER_ADMIN)

        facilities = Facility.objects.order_by("name")
        if options.get("facility"):
            facilities = facilities.filter(id=options["facility"])

        created = 0
        for facility in facilities:
            if facility.owned_departments.exists():
                self.stdout.write(f"{facility.name}: already has departments, skipping")
                continue
            for data in DEFAULT_DEPARTMENTS:
                DepartmentService.create(caller=system, facility_id=facility.id, data=data)
                created += 1
            self.stdout.write(f"{facility.name}: created {len(DEFAULT_DEPARTMENTS)} departments")

        self.stdout.write(self.style.SUCCESS(f"Departments ensured. Newly created: {created}"))
