# teamboard/routers/user.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.models.user import User
from teamboard.schemas.user import UserOut, UserUpdate
from teamboard.services import accounts
from teamboard.utils.auth import get_current_user

router = APIRouter()


@router.get("/me", response_model=UserOut)
def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user


@router.put("/me", response_model=UserOut)
def update_profile(
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the current user's name, timezone, notification preferences or picture"""
    return accounts.update_profile(db, current_user, user_update)
