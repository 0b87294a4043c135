from fastapi import APIRouter, HTTPException, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from motour.core.config import settings
from motour.core.database import get_db
from motour.models import AdminUser
from motour.auth.password import password_manager
from motour.auth.jwt_manager import jwt_manager, ADMIN_SCOPE
from motour.auth.rate_limiter import login_rate_limiter
from motour.auth.middleware import get_current_admin, CurrentAdmin, ADMIN_COOKIE_NAME

router = APIRouter(prefix="/admin/auth", tags=["admin"])


class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=1)


class AdminInfo(BaseModel):
    id: int
    username: str
    role: str


class AdminLoginResponse(BaseModel):
    token: str
    admin: AdminInfo


@router.post("/login", response_model=AdminLoginResponse)
async def admin_login(request: AdminLoginRequest, response: Response, db: Session = Depends(get_db)):
    """Authenticate an admin; the token is returned and also set as the adminToken cookie."""
    username = request.username.strip()

    can_attempt, lockout_until = login_rate_limiter.check(username, realm="admin")
    if not can_attempt:
        raise HTTPException(
            status_code=429,
            detail=f"Too many login attempts. Try again after {lockout_until}",
            headers={"Retry-After": "300"}
        )

    admin = db.query(AdminUser).filter(AdminUser.username == username).first()
    if not admin or not password_manager.verify_password(request.password, admin.password_hash):
        login_rate_limiter.record(username, False, realm="admin")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    login_rate_limiter.record(username, True, realm="admin")

    token = jwt_manager.create_access_token(admin.id, ADMIN_SCOPE, role=admin.role)
    response.set_cookie(
        ADMIN_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=settings.jwt_access_token_expire_minutes * 60
    )

    return AdminLoginResponse(
        token=token,
        admin=AdminInfo(id=admin.id, username=admin.username, role=admin.role)
    )


@router.post("/logout")
async def admin_logout(response: Response):
    """Clear the admin session cookie."""
    response.delete_cookie(ADMIN_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=AdminInfo)
async def get_admin_info(current_admin: CurrentAdmin = Depends(get_current_admin)):
    """Get the authenticated admin."""
    return AdminInfo(id=current_admin.admin_id, username=current_admin.username, role=current_admin.role)
