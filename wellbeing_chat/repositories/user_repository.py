"""
Credential store: user records keyed by (case-insensitive) email.
All operations are sync; the async service layer runs them in an executor.
"""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from wellbeing_chat.auth import hash_password, normalize_email, verify_password
from wellbeing_chat.errors import DuplicateEmail, StoreFailure
from wellbeing_chat.models.user import User

logger = logging.getLogger(__name__)


def find_user_by_email(db: Session, email: str) -> User | None:
    try:
        return db.query(User).filter(User.email == normalize_email(email)).first()
    except SQLAlchemyError as e:
        logger.exception("User lookup failed")
        raise StoreFailure() from e


def create_user(db: Session, email: str, password: str, name: str) -> str:
    """Insert a new user and return its id. Raises DuplicateEmail if the email is taken."""
    email = normalize_email(email)
    if find_user_by_email(db, email) is not None:
        raise DuplicateEmail()

    user = User(email=email, password_hash=hash_password(password), name=(name or "").strip()[:100])
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # lost a race with a concurrent signup for the same email
        db.rollback()
        raise DuplicateEmail() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("User insert failed")
        raise StoreFailure() from e
    db.refresh(user)
    logger.info("Created user %s", user.id)
    return user.id


def validate_user(db: Session, email: str, password: str) -> dict | None:
    """
    Returns {id, email, name} when the credentials match, otherwise None.
    Unknown email and wrong password are deliberately indistinguishable.
    """
    user = find_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return {"id": user.id, "email": user.email, "name": user.name}


class UserRepository:
    """Thin wrapper for dependency injection; delegates to module functions."""

    @staticmethod
    def find_user_by_email(db: Session, email: str) -> User | None:
        return find_user_by_email(db, email)

    @staticmethod
    def create_user(db: Session, email: str, password: str, name: str) -> str:
        return create_user(db, email, password, name)

    @staticmethod
    def validate_user(db: Session, email: str, password: str) -> dict | None:
        return validate_user(db, email, password)
