"""Request pipeline: negotiation, error mapping, and ASGI sending."""

from hammock.server.errors import handle_error, status_line
from hammock.server.handler import handle_request
from hammock.server.negotiation import negotiate

__all__ = ["handle_error", "handle_request", "negotiate", "status_line"]
