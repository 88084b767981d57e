from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from wellbeing_chat.database import get_db
from wellbeing_chat.repositories.user_repository import UserRepository
from wellbeing_chat.schemas.user import AccountResponse, LoginRequest, SignupRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_user_repository() -> UserRepository:
    return UserRepository()


@router.post("/signup", response_model=AccountResponse)
def signup(
    body: SignupRequest,
    db: Session = Depends(get_db),
    users: UserRepository = Depends(get_user_repository),
):
    """Create an account. 409 if the email is already registered."""
    email = body.email.strip()
    name = body.name.strip()
    if not email or not body.password or not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email, password and name are required",
        )
    user_id = users.create_user(db, email, body.password, name)
    return AccountResponse(id=user_id, email=email.lower(), name=name, isNewUser=True)


@router.post("/login", response_model=AccountResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    users: UserRepository = Depends(get_user_repository),
):
    """Login with email and password."""
    if not body.email.strip() or not body.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and password are required")
    user = users.validate_user(db, body.email, body.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return AccountResponse(**user, isNewUser=False)
