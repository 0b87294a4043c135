from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from motour.core.config import settings

USER_SCOPE = "user"
ADMIN_SCOPE = "admin"


class JWTManager:
    """Issues and verifies access tokens for app users and admin users."""
    
    def __init__(self, secret_key: str, algorithm: str, access_token_ttl: timedelta):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl
    
    def create_access_token(self, subject_id: int, scope: str, role: Optional[str] = None) -> str:
        """Create a new access token."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "scope": scope,
            "role": role,
            "iat": now,
            "exp": now + self.access_token_ttl,
            "type": "access"
        }
        
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
    
    def verify_access_token(self, token: str, scope: str) -> Optional[Dict[str, Any]]:
        """Verify and decode an access token issued for the given scope."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        
        # Check token type and audience
        if payload.get("type") != "access" or payload.get("scope") != scope:
            return None
        
        if not str(payload.get("sub", "")).isdigit():
            return None
        
        return payload


# Global JWT manager instance
jwt_manager = JWTManager(
    secret_key=settings.jwt_secret_key,
    algorithm=settings.jwt_algorithm,
    access_token_ttl=timedelta(minutes=settings.jwt_access_token_expire_minutes)
)
