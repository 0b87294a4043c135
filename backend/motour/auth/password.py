from passlib.context import CryptContext


class PasswordManager:
    """Thin wrapper around passlib's bcrypt context."""

    def __init__(self):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def hash_password(self, password: str) -> str:
        return self._context.hash(password)

    def verify_password(self, password: str, hashed_password: str) -> bool:
        return self._context.verify(password, hashed_password)

    def needs_rehash(self, hashed_password: str) -> bool:
        return self._context.needs_update(hashed_password)


password_manager = PasswordManager()
