import uuid
from django.conf import settings


class RequestIdMiddleware:
    """
    - Take the request id from REQUEST_ID_HEADER, or mint one.
    - Attach request.request_id (picked up by audit ExecutionContext).
    - Echo it on the response.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        header_name = getattr(settings, "REQUEST_ID_HEADER", "X-Request-Id")
        raw = (request.headers.get(header_name) or "").strip()

        request.request_id = raw[:64] if raw else uuid.uuid4().hex

        response = self.get_response(request)
        response[header_name] = request.request_id
        return response
