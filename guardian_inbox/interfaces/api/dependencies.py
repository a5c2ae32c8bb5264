"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from guardian_inbox.application.use_cases.notifications import InboxRegistry, NotificationInbox
from guardian_inbox.domain.entities import User
from guardian_inbox.infrastructure.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str) -> User:
    """Resolve the authenticated user for the provided token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized("Invalid credentials") from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise _unauthorized("Invalid credentials")

    email = payload.get("email")
    name = payload.get("name")
    return User(
        id=subject,
        email=email if isinstance(email, str) else None,
        name=name if isinstance(name, str) else None,
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """Return the authenticated user from the bearer token."""

    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")
    return resolve_current_user(credentials.credentials)


def get_inbox_registry(request: Request) -> InboxRegistry:
    return request.app.state.inbox_registry


def get_inbox(
    current_user: User = Depends(get_current_user),
    registry: InboxRegistry = Depends(get_inbox_registry),
) -> NotificationInbox:
    """Return the inbox owned by the authenticated user."""

    return registry.get(current_user.id)
