# clinic/management/commands/clear_sessions.py
from django.core.management.base import BaseCommand
from django.db import transaction
from clinic.models import Session, SessionMedicine, SessionTreatment


class Command(BaseCommand):
    help = "Delete all billing sessions and their line items. Patients, treatments and stock stay."

    def handle(self, *args, **opts):
        with transaction.atomic():
            medicines, _ = SessionMedicine.objects.all().delete()
            treatments, _ = SessionTreatment.objects.all().delete()
            sessions, _ = Session.objects.all().delete()
        self.stdout.write(f"Deleted session medicine items: {medicines}")
        self.stdout.write(f"Deleted session treatment items: {treatments}")
        self.stdout.write(self.style.SUCCESS(f"Deleted sessions: {sessions}"))
