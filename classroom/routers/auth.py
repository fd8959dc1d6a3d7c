import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classroom.core.errors import AuthenticationError
from classroom.core.security.auth import create_access_token, verify_password
from classroom.crud.users import create_user, get_user_by_email
from classroom.db.session import get_db
from classroom.schemas.user import AuthResponse, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    user = create_user(db, request.model_dump())
    logger.info("Registered %s user %s", user.role.value, user.id)
    return {"user": user, "token": create_access_token(user)}

@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, request.email)

    # Verify credentials
    if not user or not verify_password(request.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")

    return {"user": user, "token": create_access_token(user)}
