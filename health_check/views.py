from django.conf import settings
from django.db import connection
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

import logging
logger = logging.getLogger(__name__)


@require_GET
def health_check(request: HttpRequest) -> JsonResponse:
    """
    Health check endpoint for monitoring and load balancers.

    Verifies database connectivity and reports the configured text generation
    model. Deliberately unauthenticated.

    Returns:
        JsonResponse with status 200 if healthy, 503 if the database is unreachable
    """
    payload = {
        'model': settings.OPENAI_MODEL,
        'timestamp': timezone.now().isoformat(),
    }
    try:
        connection.ensure_connection()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JsonResponse({
            **payload,
            'status': 'unhealthy',
            'database': 'unreachable',
        }, status=503)

    return JsonResponse({
        **payload,
        'status': 'healthy',
        'database': 'connected',
    })
