# practice/management/commands/seed_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from practice.models import User

SEED_SET = [
    ("nurse@clinic.local", "Nora Nurse", "nurse"),
    ("doctor@clinic.local", "Dan Doctor", "doctor"),
    ("admin@clinic.local", "Ada Admin", "admin"),
    ("patient@clinic.local", "Pat Patient", "patient"),
]


class Command(BaseCommand):
    help = "Ensure one login per clinic role exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="clinic-demo-2024")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for email, name, role in SEED_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={"username": email, "name": name, "role": role, "password": password, "is_active": True},
            )
            if not created:
                u.password = password
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All clinic users ensured."))
