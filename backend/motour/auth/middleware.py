from typing import Optional, Sequence
from fastapi import HTTPException, Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from motour.auth.jwt_manager import jwt_manager, USER_SCOPE, ADMIN_SCOPE
from motour.core.database import get_db
from motour.models import User, AdminUser, ADMIN_ROLES

# Security scheme for FastAPI
security = HTTPBearer(auto_error=False)

ADMIN_COOKIE_NAME = "adminToken"


class CurrentUser:
    """Context class to hold the authenticated app user."""
    def __init__(self, user_id: int, email: str, name: str):
        self.user_id = user_id
        self.email = email
        self.name = name


class CurrentAdmin:
    """Context class to hold the authenticated admin user."""
    def __init__(self, admin_id: int, username: str, role: str):
        self.admin_id = admin_id
        self.username = username
        self.role = role


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> CurrentUser:
    """Dependency to get the current authenticated app user."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    payload = jwt_manager.verify_access_token(credentials.credentials, USER_SCOPE)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = db.query(User).filter(User.id == int(payload["sub"])).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token. User not found.")
    if user.status == "blocked":
        raise HTTPException(status_code=403, detail="Account is blocked")

    return CurrentUser(user_id=user.id, email=user.email, name=user.name)


async def get_current_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> CurrentAdmin:
    """Dependency to get the current admin from the adminToken cookie or a Bearer header."""
    token = request.cookies.get(ADMIN_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials

    if not token:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    payload = jwt_manager.verify_access_token(token, ADMIN_SCOPE)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token.")

    admin = db.query(AdminUser).filter(AdminUser.id == int(payload["sub"])).first()
    if not admin:
        raise HTTPException(status_code=401, detail="Invalid token. Admin user not found.")

    return CurrentAdmin(admin_id=admin.id, username=admin.username, role=admin.role)


def require_admin_role(allowed_roles: Sequence[str] = ADMIN_ROLES):
    """Factory function to create a role requirement dependency."""
    async def role_dependency(current_admin: CurrentAdmin = Depends(get_current_admin)) -> CurrentAdmin:
        if current_admin.role not in allowed_roles:
            raise HTTPException(status_code=403, detail="Access denied. Insufficient permissions.")
        return current_admin
    return role_dependency
