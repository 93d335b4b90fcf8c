import logging

logger = logging.getLogger(__name__)


class AccessLogMiddleware:
    """Log one line per request: method, path, client address, user agent, status."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        logger.info(
            f"{request.method} {request.path} {client_address(request)} "
            f"{request.META.get('HTTP_USER_AGENT', '')!r} {response.status_code}"
        )
        return response


def client_address(request) -> str:
    # X-Real-IP is set by the reverse proxy in front of the service
    return request.META.get("HTTP_X_REAL_IP") or request.META.get("REMOTE_ADDR", "")
