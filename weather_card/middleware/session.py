"""FastAPI middleware that assigns each client a session ID, so cards persist between requests."""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Optional
import uuid

SESSION_HEADER = "X-Session-ID"


class SessionMiddleware(BaseHTTPMiddleware):
    """Middleware to handle session IDs"""

    def __init__(self, app, session_cookie_name: str = "weather_session_id"):
        """Initializes the middleware."""
        super().__init__(app)
        self.session_cookie_name = session_cookie_name

    async def dispatch(self, request: Request, call_next):
        """Attaches the session ID to the request and sets the cookie for new clients."""
        session_id = self._get_session_id(request)
        new_session = session_id is None
        if new_session:
            session_id = str(uuid.uuid4())

        request.state.session_id = session_id
        response = await call_next(request)

        if new_session and response.status_code < 400:
            response.set_cookie(
                key=self.session_cookie_name,
                value=session_id,
                max_age=3600 * 24,  # 1 day
                httponly=True,
                samesite="lax",
            )
        response.headers[SESSION_HEADER] = session_id

        return response

    def _get_session_id(self, request: Request) -> Optional[str]:
        """Extract session ID from cookie, or header for API clients"""
        return request.cookies.get(self.session_cookie_name) or request.headers.get(
            SESSION_HEADER
        )
