# ============================================================
# auth.py — Staff authentication
# ------------------------------------------------------------
#   - POST /api/auth/login : username + password -> JWT
#   - get_current_user     : dependency guarding the /api routes
#   - ensure_admin         : creates the default account when the
#                            users table is empty
# Passwords are stored as bcrypt hashes, tokens are HS256 JWTs.
# ============================================================
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from config import Config
from db import get_session
from models import LoginRequest, LoginResponse, User, UserOut
from repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()
bearer = HTTPBearer(auto_error=False)


@dataclass
class Identity:
    id: int
    username: str
    role: str


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in the table
        return False


def create_token(user: User) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(hours=Config.JWT_EXPIRE_HOURS),
    }
    return jwt.encode(claims, Config.JWT_SECRET, algorithm=Config.JWT_ALGORITHM)


def decode_token(token: str) -> Identity:
    claims = jwt.decode(token, Config.JWT_SECRET, algorithms=[Config.JWT_ALGORITHM])
    return Identity(id=int(claims["sub"]), username=claims["username"], role=claims["role"])


def authenticate(s: Session, username: str, password: str) -> Optional[User]:
    user = UserRepository(s).get_by_username(username)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def ensure_admin(s: Session):
    repo = UserRepository(s)
    if repo.count() > 0:
        return
    try:
        repo.create(User(
            username=Config.ADMIN_USERNAME,
            password_hash=hash_password(Config.ADMIN_PASSWORD),
            role="admin",
        ))
    except IntegrityError:
        # another worker starting at the same time created it first
        s.rollback()
        logger.info("[auth] default admin user %r already created by another worker", Config.ADMIN_USERNAME)
        return
    logger.info("[auth] default admin user %r created", Config.ADMIN_USERNAME)


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Identity:
    if credentials is None:
        raise HTTPException(401, "Authorization header required")
    try:
        return decode_token(credentials.credentials)
    except (jwt.PyJWTError, KeyError, ValueError):
        raise HTTPException(401, "Invalid token")


# ------------------------------------------------------------
# POST /api/auth/login
# ------------------------------------------------------------
@router.post("/api/auth/login", response_model=LoginResponse)
def login(req: LoginRequest, s: Session = Depends(get_session)):
    user = authenticate(s, req.username, req.password)
    if user is None:
        logger.warning("[auth] failed login for %r", req.username)
        raise HTTPException(401, "Invalid credentials")
    return LoginResponse(token=create_token(user), user=UserOut.model_validate(user))
