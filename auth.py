# backend/auth.py
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import get_settings
from errors import Unauthorized
from schemas import UserRecord
from storage import Storage

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def get_storage(request: Request) -> Storage:
    """The backend chosen at startup"""
    return request.app.state.storage


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict):
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def resolve_user(token: Optional[str], storage: Storage) -> Optional[UserRecord]:
    """User for a bearer token, or None when the token is missing or bad"""
    if not token:
        return None
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        subject = payload.get("sub")
        if subject is None:
            return None
        user_id = int(subject)
    except (JWTError, ValueError):
        return None
    return storage.get_user(user_id)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    storage: Storage = Depends(get_storage),
) -> UserRecord:
    user = resolve_user(token, storage)
    if user is None:
        raise Unauthorized("Could not validate credentials")
    return user


def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    storage: Storage = Depends(get_storage),
) -> Optional[UserRecord]:
    return resolve_user(token, storage)
