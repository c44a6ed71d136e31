import logging
import time

logger = logging.getLogger('audit')


def client_ip(request):
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class UserActivityLoggingMiddleWare:
    """
    One audit line per request: who, what, outcome and latency.

    The resolved client address is stored on ``request.client_ip`` so the
    presence views record the same address the audit log shows.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.client_ip = client_ip(request)
        started = time.monotonic()

        response = self.get_response(request)

        elapsed_ms = (time.monotonic() - started) * 1000
        user = getattr(request, 'user', None)
        actor = f"user:{user.pk}" if user is not None and user.is_authenticated else "anonymous"

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{actor} {request.method} {request.get_full_path()} -> {response.status_code} "
            f"({elapsed_ms:.0f} ms) ip={request.client_ip}"
        )
        return response
