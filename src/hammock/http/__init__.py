"""HTTP types: the immutable request view and the response value."""

from hammock.http.headers import Headers
from hammock.http.request import Request
from hammock.http.response import Response

__all__ = ["Headers", "Request", "Response"]
