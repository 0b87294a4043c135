from fastapi import APIRouter, HTTPException, Depends, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from motour.core.database import get_db
from motour.models import User
from motour.auth.password import password_manager
from motour.auth.jwt_manager import jwt_manager, USER_SCOPE
from motour.auth.rate_limiter import login_rate_limiter
from motour.auth.middleware import get_current_user, CurrentUser
from motour.schemas.user import UserResponse

router = APIRouter(prefix="/api/auth", tags=["authentication"])


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


def _issue(user: User) -> AuthResponse:
    return AuthResponse(
        token=jwt_manager.create_access_token(user.id, USER_SCOPE),
        user=UserResponse.model_validate(user)
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create an app user account and return an access token."""
    email = request.email.lower()

    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="Email is already registered")

    user = User(
        name=request.name.strip(),
        email=email,
        hashed_password=password_manager.hash_password(request.password)
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Email is already registered")
    db.refresh(user)

    return _issue(user)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate an app user and return an access token."""
    email = request.email.lower()

    can_attempt, lockout_until = login_rate_limiter.check(email)
    if not can_attempt:
        raise HTTPException(
            status_code=429,
            detail=f"Too many login attempts. Try again after {lockout_until}",
            headers={"Retry-After": "300"}
        )

    user = db.query(User).filter(User.email == email).first()
    if not user or not password_manager.verify_password(request.password, user.hashed_password):
        login_rate_limiter.record(email, False)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if user.status == "blocked":
        raise HTTPException(status_code=403, detail="Account is blocked")

    # Check if password needs rehashing
    if password_manager.needs_rehash(user.hashed_password):
        user.hashed_password = password_manager.hash_password(request.password)
        db.commit()

    login_rate_limiter.record(email, True)

    return _issue(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get current user information."""
    user = db.query(User).filter(User.id == current_user.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
