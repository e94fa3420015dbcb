import logging
import re
import time
import uuid
from typing import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIDMiddleware:
    """
    Identifiant de requete (X-Request-ID) repris du client s'il est propre,
    sinon genere. Accessible via request.request_id ; les reponses 5xx
    sont journalisees avec cet identifiant.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        incoming = request.headers.get("X-Request-ID", "")
        request_id = incoming if _REQUEST_ID_RE.match(incoming) else uuid.uuid4().hex
        request.request_id = request_id

        started = time.monotonic()
        response = self.get_response(request)
        response.headers["X-Request-ID"] = request_id

        if response.status_code >= 500:
            elapsed = (time.monotonic() - started) * 1000
            logger.error(
                f"[request] {request.method} {request.path} -> {response.status_code} "
                f"({elapsed:.0f} ms) id={request_id}"
            )
        return response
