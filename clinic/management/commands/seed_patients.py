# clinic/management/commands/seed_patients.py
from django.core.management.base import BaseCommand
from clinic.models import Patient

SAMPLE_PATIENTS = [
    ("Nimal Perera", "0771000001", "nimal.perera@example.com", "Colombo 05"),
    ("Sunethra Jayasuriya", "0771000002", "sunethra.j@example.com", "Kandy"),
    ("Ruwan Fernando", "0771000003", "ruwan.fernando@example.com", "Negombo"),
    ("Ishara Weerasinghe", "0771000004", "ishara.w@example.com", "Galle"),
    ("Kasun Silva", "0771000005", "kasun.silva@example.com", "Maharagama"),
    ("Tharaka Dissanayake", "0771000006", "tharaka.d@example.com", "Kurunegala"),
    ("Dilani Abeywickrama", "0771000007", "dilani.a@example.com", "Matara"),
    ("Chathura Bandara", "0771000008", "chathura.b@example.com", "Anuradhapura"),
    ("Harini Amarasinghe", "0771000009", "harini.a@example.com", "Gampaha"),
    ("Ravindu Jayawardena", "0771000010", "ravindu.j@example.com", "Colombo 03"),
]


class Command(BaseCommand):
    help = "Insert 10 sample patients. Safe to re-run: existing phone numbers are left untouched."

    def handle(self, *args, **opts):
        created_count = 0
        for name, phone, email, address in SAMPLE_PATIENTS:
            _, created = Patient.objects.get_or_create(
                phone=phone,
                defaults={"name": name, "email": email, "address": address},
            )
            created_count += int(created)
        self.stdout.write(self.style.SUCCESS(
            f"Inserted {created_count} patients, {len(SAMPLE_PATIENTS) - created_count} already present."
        ))
