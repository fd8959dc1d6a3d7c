import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.core.errors import ConflictError
from classroom.core.security.auth import get_password_hash
from classroom.models.user import User

logger = logging.getLogger(__name__)

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()

def create_user(db: Session, user_data: dict) -> User:
    """
    Create a user, hashing the plain ``password`` in ``user_data``

    Raises:
        ConflictError if the email is already registered
    """
    user_data = dict(user_data)
    user_data["hashed_password"] = get_password_hash(user_data.pop("password"))
    user_data["email"] = user_data["email"].lower()

    user = User(**user_data)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Registration rejected, email already in use: %s", user_data["email"])
        raise ConflictError("Email already registered")
    db.refresh(user)
    return user
