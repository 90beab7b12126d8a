from django.db import connections
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from practice.services.stats import counts


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except Exception as e:
        return Response({'status': 'ERROR', 'db': False, 'error': str(e)}, status=500)
    return Response({
        'status': 'OK',
        'timestamp': timezone.now().isoformat(),
        'db': bool(row and row[0] == 1),
        **counts(),
    })
