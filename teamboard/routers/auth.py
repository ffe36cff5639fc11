from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.schemas.project import ProjectBase
from teamboard.schemas.tokens import Token, SignupOut
from teamboard.schemas.user import UserCreate, UserLogin, UserOut
from teamboard.services import accounts
from teamboard.utils.security import create_access_token

router = APIRouter()


@router.post("/signup", response_model=SignupOut, status_code=status.HTTP_201_CREATED)
def signup(user: UserCreate, db: Session = Depends(get_db)):
    """Register an account; with ``invitation_token`` the account joins the inviting project"""
    result = accounts.signup(db, user)

    token = create_access_token(data={"sub": str(result.user.id)})
    return SignupOut(
        access_token=token,
        token_type="bearer",
        user=UserOut.model_validate(result.user),
        default_project=ProjectBase.model_validate(result.default_project) if result.default_project else None,
        joined_project_id=result.joined_project_id,
    )


@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = accounts.authenticate(db, user.email, user.password)

    token = create_access_token(data={"sub": str(db_user.id)})
    return Token(access_token=token, token_type="bearer", user=UserOut.model_validate(db_user))
