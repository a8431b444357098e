# portal/core/cors.py

from fastapi import Response
from starlette.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers

DROPPED_PREFLIGHT_HEADERS = {"content-length", "content-type"}


class PreflightNoContentCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose accepted preflights answer 204 with no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in DROPPED_PREFLIGHT_HEADERS
        }
        return Response(status_code=204, headers=headers)
