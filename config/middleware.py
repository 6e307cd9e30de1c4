from django.http import HttpRequest, JsonResponse

import logging
logger = logging.getLogger(__name__)

JSON_API_PREFIXES = ('/practice/', '/accounts/')


class JsonExceptionMiddleware:
    """
    Converts uncaught exceptions on the JSON API into a generic 500 body.

    Upstream failures (database, text generation) are not classified; the
    client only learns that the request failed.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest):
        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception):
        if not request.path.startswith(JSON_API_PREFIXES):
            return None

        logger.error(f"Unhandled error on {request.method} {request.path}: {exception}", exc_info=True)
        return JsonResponse({'error': 'Internal server error'}, status=500)
