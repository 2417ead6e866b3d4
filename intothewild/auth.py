from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from authlib.integrations.starlette_client import OAuth
from starlette.config import Config

from intothewild import database
from intothewild.config import SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES
from intothewild.models.user import User


# --- SECURITY SETTINGS ---
ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")
# Same scheme, but lets anonymous callers through (the registration gate reports them itself)
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

config = Config('.env') # GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET

oauth = OAuth(config)

oauth.register(
    name='google',
    server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
    client_kwargs={
        'scope': 'openid email profile',
        'timeout': 15.0,
    }
)

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password):
    return pwd_context.hash(password)

def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt

# --- AUTHENTICATION AND AUTHORIZATION DEPENDENCIES ---
def get_user(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()

def _user_from_token(token: str, db: Session) -> Optional[User]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    email = payload.get("sub")
    if email is None:
        return None
    return get_user(db, email=email)

async def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(database.get_db)):
    user = _user_from_token(token, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials", headers={"WWW-Authenticate": "Bearer"},
        )
    return user

async def get_optional_user(token: Optional[str] = Depends(optional_oauth2_scheme), db: Session = Depends(database.get_db)):
    """
    Returns the logged in user, or None for anonymous or invalid tokens.
    """
    if not token:
        return None
    user = _user_from_token(token, db)
    if user is None or user.role == "pending":
        return None
    return user

async def get_current_active_user(current_user: User = Depends(get_current_user)):
    """
    Blocks accounts still waiting for admin approval.
    """
    if current_user.role == "pending":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is pending approval by an administrator."
        )
    return current_user

async def get_admin_user(current_user: User = Depends(get_current_active_user)):
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admins only."
        )
    return current_user
