"""
Authentication and authorization dependencies.
"""
from fastapi import Request, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ForbiddenError, UnauthenticatedError
from ..models.user import User, UserRole
from .identity_provider import IdentityProvider, get_identity_provider
from .user_service import UserService


def get_current_user_from_token(
    request: Request,
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> User:
    """
    Get current user from the bearer token in the Authorization header.

    The token is verified by the identity provider; the matching user row is
    created on first login. The verified identity is kept on
    ``request.state.identity`` for handlers that need the token claims.

    Raises:
        UnauthenticatedError: header missing or token rejected
        ForbiddenError: the account has been deleted
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthenticatedError("Not authenticated. Missing or invalid Authorization header.")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise UnauthenticatedError("Not authenticated. Missing or invalid Authorization header.")

    identity = identity_provider.resolve(token)
    request.state.identity = identity

    return UserService(db).get_or_create_from_identity(identity)


def is_admin(db: Session, user_id: str) -> bool:
    """Read the caller's role from the database; never trust a cached value."""
    role = db.query(User.role).filter(User.id == user_id, User.is_deleted == False).scalar()  # noqa: E712
    return role == UserRole.ADMIN


def require_admin(
    current_user: User = Depends(get_current_user_from_token),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency to require the admin role.

    Raises:
        ForbiddenError: If user is not an admin
    """
    if not is_admin(db, current_user.id):
        raise ForbiddenError("Only administrators can perform this action.")
    return current_user
