from django.utils import timezone

from clinic.models import Appointment, Patient, Session, Treatment

RECENT_SESSIONS = 5


def summary() -> dict:
    """Counts and short lists shown on the dashboard."""
    today = timezone.localdate()
    todays = (Appointment.objects.select_related('patient')
              .filter(date=today).order_by('time', 'id'))
    recent = Session.objects.select_related('patient').order_by('-date', '-created_at')[:RECENT_SESSIONS]
    return {
        'counts': {
            'patients': Patient.objects.count(),
            'treatments': Treatment.objects.count(),
            'appointmentsToday': todays.count(),
        },
        'todayAppointments': [
            {
                'id': a.id,
                'patientName': a.patient.name,
                'patientPhone': a.patient.phone,
                'status': a.status,
                'time': a.time.strftime('%H:%M'),
            }
            for a in todays
        ],
        'recentSessions': [
            {
                'id': s.id,
                'patientName': s.patient.name,
                'total': s.total,
                'date': s.date,
            }
            for s in recent
        ],
    }
