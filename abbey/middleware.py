import time
import logging
import json
from django.conf import settings

logger = logging.getLogger('abbey')


class RequestLogMiddleware:
    """
    Writes one JSON line per API request: who called, what came back and
    how long it took. Server errors log at ERROR, client errors at WARNING.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # DRF authenticates inside the view and copies the user back onto the Django request
        user = getattr(request, 'user', None)
        entry = {
            'method': request.method,
            'path': request.path,
            'user_id': user.pk if user is not None and user.is_authenticated else None,
            'status_code': response.status_code,
            'duration': round(elapsed_ms, 2),
        }
        if settings.DEBUG and request.GET:
            entry['query_params'] = request.GET.dict()

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(level, f"Request: {json.dumps(entry)}")

        return response
