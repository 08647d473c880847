import logging
from passlib.context import CryptContext
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from database import get_db
from models import User, FlashcardSet
from typing import Optional

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def verify_password(plain_password, hashed_password):
    if isinstance(plain_password, str) and len(plain_password) > 72:
        plain_password = plain_password[:72]
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    if isinstance(password, str) and len(password) > 72:
        password = password[:72]
    return pwd_context.hash(password)


def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_username(token: str) -> Optional[str]:
    if token.startswith("Bearer "):
        token = token[7:]
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token decoding failed: {e}")
        return None
    return payload.get("sub")


async def get_user(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def authenticate_user(db: AsyncSession, username: str, password: str) -> Optional[User]:
    user = await get_user(db, username)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    username = decode_username(token)
    if username is None:
        raise credentials_exception

    user = await get_user(db, username)
    if user is None:
        raise credentials_exception
    return user


async def get_current_superuser(current_user: User = Depends(get_current_user)):
    if not current_user.is_superuser:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required")
    return current_user


def require_set_owner(flashcard_set: FlashcardSet, user: User):
    """Only the set's creator or a superuser may change it or its cards."""
    if user.is_superuser:
        return
    if flashcard_set.created_by is None or flashcard_set.created_by != user.username:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only modify your own sets")


async def ensure_superuser(db: AsyncSession, username: str, password: Optional[str]):
    if not password:
        logger.warning("ADMIN_PASSWORD is not set; no administrator account was created")
        return None
    result = await db.execute(select(User).where(User.is_superuser == True))
    superuser = result.scalars().first()
    if superuser:
        return superuser
    admin_user = User(username=username, hashed_password=get_password_hash(password), is_superuser=True)
    db.add(admin_user)
    await db.commit()
    logger.info(f"Created administrator account {username!r}")
    return admin_user
