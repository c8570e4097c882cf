"""
Current-user resolution.

Authentication itself happens at the identity provider. By the time a request
reaches this service the provider's proxy has put the principal id in a
header; ``IdentityMiddleware`` binds it to the request context and the
repositories ask ``SessionIdentity`` for it.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Protocol

from productivity.errors import UnauthenticatedError

_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)


class IdentityResolver(Protocol):
    async def current_user_id(self) -> str: ...


class SessionIdentity:
    """Resolves the principal bound to the running request or task."""

    async def current_user_id(self) -> str:
        user_id = _current_user_id.get()
        if not user_id:
            raise UnauthenticatedError()
        return user_id

    @contextmanager
    def session(self, user_id: str | None) -> Iterator[None]:
        token = _current_user_id.set(user_id)
        try:
            yield
        finally:
            _current_user_id.reset(token)


class IdentityMiddleware:
    """ASGI middleware binding the identity header to the request context."""

    def __init__(self, app, header: str, identity: SessionIdentity | None = None):
        self.app = app
        self.header = header.lower().encode("latin-1")
        self.identity = identity or SessionIdentity()

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        user_id = None
        for name, value in scope.get("headers", []):
            if name == self.header:
                user_id = value.decode("latin-1").strip() or None
                break

        with self.identity.session(user_id):
            await self.app(scope, receive, send)
