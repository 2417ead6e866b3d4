from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from intothewild import database
from intothewild.auth import get_admin_user
from intothewild.models.user import User
from intothewild.schemas.user import UserRead, UserUpdate

router = APIRouter(
    prefix="/api/v1/users",
    tags=["Users"],
    dependencies=[Depends(get_admin_user)]
)

@router.get("", response_model=List[UserRead])
def read_users(skip: int = 0, limit: int = 100, db: Session = Depends(database.get_db)):
    return db.query(User).order_by(User.id).offset(skip).limit(limit).all()

@router.put("/{user_id}", response_model=UserRead)
def update_user(user_id: int, user: UserUpdate, db: Session = Depends(database.get_db)):
    db_user = db.query(User).filter(User.id == user_id).first()
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")

    for key, value in user.model_dump(exclude_unset=True).items():
        setattr(db_user, key, value)

    db.commit()
    db.refresh(db_user)
    return db_user
