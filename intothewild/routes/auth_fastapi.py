from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import RedirectResponse
from authlib.integrations.starlette_client import OAuthError
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from intothewild import auth, database
from intothewild.config import FRONTEND_URL, BACKEND_URL
from intothewild.models.user import User
from intothewild.schemas.user import UserSignup, UserRead, Token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["Authentication"]
)

@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserSignup, db: Session = Depends(database.get_db)):
    """
    Creates a participant account.
    """
    if db.query(User).filter(User.username == user_data.username).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This username is already taken.")
    if auth.get_user(db, email=user_data.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This email is already registered.")

    new_user = User(
        username=user_data.username,
        email=user_data.email,
        full_name=user_data.full_name,
        phone=user_data.phone,
        hashed_password=auth.get_password_hash(user_data.password),
        role="participant"
    )
    try:
        db.add(new_user)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error creating user {user_data.email}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This account already exists.")
    db.refresh(new_user)
    return new_user

@router.post("/token", response_model=Token)
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(database.get_db)):
    user = auth.get_user(db, email=form_data.username) # email goes in the username field
    if not user or not user.hashed_password or not auth.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = auth.create_access_token(
        data={"sub": user.email, "role": user.role}
    )
    return {"access_token": access_token, "token_type": "bearer", "user_info": UserRead.model_validate(user)}

def _unique_username(db: Session, email: str) -> str:
    """
    Google accounts get ``<local part>_g``; a numeric suffix is added when
    another domain already took it.
    """
    base = email.split('@')[0] + "_g"
    username = base
    suffix = 2
    while db.query(User.id).filter(User.username == username).first():
        username = f"{base}{suffix}"
        suffix += 1
    return username

@router.get('/login/google')
async def login_google(request: Request):
    """
    Redirects to Google's consent page.
    """
    redirect_uri = f"{BACKEND_URL.rstrip('/')}/api/v1/auth/callback/google"
    return await auth.oauth.google.authorize_redirect(request, redirect_uri)

@router.get('/callback/google', name='auth_google_callback')
async def auth_google_callback(request: Request, db: Session = Depends(database.get_db)):
    """
    Google calls back here; new accounts start as 'pending' until an admin approves them.
    """
    try:
        token = await auth.oauth.google.authorize_access_token(request)
    except OAuthError as e:
        logger.warning(f"Google token exchange failed: {e}")
        raise HTTPException(status_code=401, detail="Could not sign in with Google.")

    google_user = token.get('userinfo')
    if not google_user or not google_user.get('email'):
        raise HTTPException(status_code=400, detail="Google did not share an email address.")

    email = google_user['email']
    user = auth.get_user(db, email=email)
    if not user:
        user = User(
            username=_unique_username(db, email),
            email=email,
            full_name=google_user.get('name', 'Google user'),
            role='pending'
        )
        db.add(user)
        db.commit()
        db.refresh(user)

    access_token = auth.create_access_token(
        data={"sub": user.email, "role": user.role}
    )
    return RedirectResponse(url=f"{FRONTEND_URL}/login/callback?token={access_token}")

@router.get("/me", response_model=UserRead)
async def read_users_me(current_user: User = Depends(auth.get_current_active_user)):
    return current_user
