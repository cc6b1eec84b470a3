from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services.billing import as_number
from ..services.dashboard import summary


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_view(request):
    """Counts, today's appointments and the latest billing sessions."""
    data = summary()
    data['recentSessions'] = [
        {**s, 'total': as_number(s['total']), 'date': s['date'].isoformat()}
        for s in data['recentSessions']
    ]
    return Response({'data': data})
