"""User management utilities.

This module is the credential store. It owns account persistence, password
hashing, student linking codes, and the stored half of password reset tokens.
No other module writes to the users table.
"""

import logging
import secrets
from datetime import datetime
from typing import Optional

import bcrypt
import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import BCRYPT_ROUNDS, CODE_INSERT_ATTEMPTS, MIN_PASSWORD_LENGTH
from core.database import commit
from core.exceptions import (
    DuplicateEmailError,
    LitPlatformError,
    ValidationError,
    WeakPasswordError,
)
from models.achievement import UserAchievementModel
from models.auth_session import AuthSessionModel
from models.class_enrollment import ClassEnrollmentModel
from models.class_model import ClassModel
from models.parent_child_link import ParentChildLinkModel
from models.reading_progress import ReadingProgressModel
from models.submission import SubmissionModel
from models.user import UserModel
from schemas.user import User
from utils.authorization import ROLES, STUDENT
from utils.code_generator import generate_unique_code
from utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of the password
BCRYPT_MAX_BYTES = 72

CREATE_EXTRA_FIELDS = frozenset({"profile_picture", "google_id", "email_verified"})
UPDATABLE_FIELDS = frozenset(
    {"name", "email", "password", "profile_picture", "google_id", "email_verified"}
)
NON_NULLABLE_FIELDS = frozenset({"name", "email", "password", "email_verified"})

# Compared against when the email is unknown, so both login failures cost one hash.
# Built at import so the first unknown-email login does no extra hashing.
_DUMMY_HASH = bcrypt.hashpw(secrets.token_bytes(16), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        logger.warning(
            "Password exceeds %d bytes (%d bytes), truncating",
            BCRYPT_MAX_BYTES,
            len(password_bytes),
        )
        password_bytes = password_bytes[:BCRYPT_MAX_BYTES]
    return password_bytes


def check_password_strength(password: str) -> None:
    """Raise ``WeakPasswordError`` if the password is too short."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(MIN_PASSWORD_LENGTH)


def _now_iso() -> str:
    return datetime.now(pytz.utc).isoformat()


class UserManager:
    """Manages account persistence and credentials using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def check_password(self, plain_password: str, hashed_password: str) -> bool:
        """Check a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to check.
            hashed_password: Bcrypt hash string to check against.

        Returns:
            True if password matches, False otherwise.
        """
        if isinstance(hashed_password, str):
            hashed_password = hashed_password.encode("utf-8")
        try:
            return bcrypt.checkpw(_password_bytes(plain_password), hashed_password)
        except ValueError as e:
            # Malformed stored hash
            logger.error("Password verification error: %s", e)
            return False

    def _get_model(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.user_id == user_id).first()

    def _get_model_by_email(self, email: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.email == email).first()

    def _student_code_exists(self, code: str) -> bool:
        return (
            self.db.query(UserModel.user_id)
            .filter(UserModel.student_code == code)
            .first()
            is not None
        )

    def create_account(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        **extra,
    ) -> User:
        """Create a new account.

        Students receive a unique linking code. A unique-index violation on
        insert is re-examined: if the email now exists the signup lost a race
        and fails as a duplicate; otherwise the student code collided and a
        new one is drawn.

        Args:
            name: Display name.
            email: Email address, unique and case-sensitive.
            password: Plain text password.
            role: 'student', 'teacher', or 'parent'.
            **extra: Optional ``profile_picture``, ``google_id``,
                ``email_verified``.

        Returns:
            Created User object.

        Raises:
            ValidationError: If the role or an extra field is invalid.
            WeakPasswordError: If the password is too short.
            DuplicateEmailError: If the email is already registered.
        """
        if role not in ROLES:
            raise ValidationError(f"Invalid role: {role}. Must be one of {', '.join(ROLES)}.")
        unknown = set(extra) - CREATE_EXTRA_FIELDS
        if unknown:
            raise ValidationError(f"Unknown account field(s): {', '.join(sorted(unknown))}")
        check_password_strength(password)

        if self._get_model_by_email(email) is not None:
            raise DuplicateEmailError(email)

        password_hash = self.hash_password(password)

        for _ in range(CODE_INSERT_ATTEMPTS):
            student_code = None
            if role == STUDENT:
                student_code = generate_unique_code(self._student_code_exists)
            user = User(
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                student_code=student_code,
                **extra,
            )
            try:
                self.db.add(user_to_model(user))
                commit(self.db)
            except IntegrityError as e:
                self.db.rollback()
                if self._get_model_by_email(email) is not None:
                    raise DuplicateEmailError(email) from e
                if student_code is None:
                    raise
                logger.warning("Student code collided on insert, drawing a new one")
                continue

            logger.info("Created %s account: %s", role, user.user_id)
            return user

        raise LitPlatformError("Could not allocate a unique student code")

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Get an account by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self._get_model(user_id)
        if model:
            return model_to_user(model)
        return None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get an account by exact email."""
        model = self._get_model_by_email(email)
        if model:
            return model_to_user(model)
        return None

    def get_by_linking_code(self, code: str) -> Optional[User]:
        """Get a student account by its linking code."""
        model = self.db.query(UserModel).filter(UserModel.student_code == code).first()
        if model:
            return model_to_user(model)
        return None

    def update_account(self, user_id: str, /, **fields) -> Optional[User]:
        """Apply a partial update to an account.

        A ``password`` field is re-hashed before storing. The hash, the role,
        and the reset-token fields cannot be written through this method.

        Args:
            user_id: Account to update.
            **fields: Subset of name, email, password, profile_picture,
                google_id, email_verified.

        Returns:
            The updated User, or None if the account does not exist.

        Raises:
            ValidationError: If a field is not updatable or is null where
                a value is required.
            WeakPasswordError: If a new password is too short.
            DuplicateEmailError: If the new email belongs to another account.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        for key in NON_NULLABLE_FIELDS & set(fields):
            if fields[key] is None:
                raise ValidationError(f"Field '{key}' cannot be null")
        if "password" in fields:
            check_password_strength(fields["password"])

        model = self._get_model(user_id)
        if model is None:
            return None

        new_email = fields.get("email")
        if new_email is not None and new_email != model.email:
            if self._get_model_by_email(new_email) is not None:
                raise DuplicateEmailError(new_email)

        for key, value in fields.items():
            if key == "password":
                model.password_hash = self.hash_password(value)
            else:
                setattr(model, key, value)
        model.updated_at = _now_iso()

        try:
            commit(self.db)
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEmailError(new_email or model.email) from e
        self.db.refresh(model)
        logger.info("Updated account %s: %s", user_id, ", ".join(sorted(fields)))
        return model_to_user(model)

    def delete_account(self, user_id: str) -> bool:
        """Delete an account and the rows that belong to it.

        Args:
            user_id: Account to delete.

        Returns:
            True if an account existed and was removed.
        """
        model = self._get_model(user_id)
        if model is None:
            return False

        self.db.query(AuthSessionModel).filter(AuthSessionModel.user_id == user_id).delete()
        self.db.query(ParentChildLinkModel).filter(
            (ParentChildLinkModel.parent_id == user_id)
            | (ParentChildLinkModel.child_id == user_id)
        ).delete(synchronize_session=False)
        self.db.query(ClassEnrollmentModel).filter(
            ClassEnrollmentModel.student_id == user_id
        ).delete()
        self.db.query(SubmissionModel).filter(SubmissionModel.student_id == user_id).delete()
        self.db.query(ReadingProgressModel).filter(ReadingProgressModel.user_id == user_id).delete()
        self.db.query(UserAchievementModel).filter(UserAchievementModel.user_id == user_id).delete()
        # ORM delete so enrollments and assignments cascade
        for class_model in self.db.query(ClassModel).filter(ClassModel.teacher_id == user_id):
            self.db.delete(class_model)
        self.db.delete(model)
        commit(self.db)
        logger.info("Deleted account: %s", user_id)
        return True

    def verify_password(self, email: str, password: str) -> Optional[User]:
        """Check login credentials.

        Unknown email and wrong password are indistinguishable to the caller,
        and both perform one bcrypt comparison.

        Args:
            email: Email to look up.
            password: Plain text password.

        Returns:
            The User on success, None otherwise.
        """
        model = self._get_model_by_email(email)
        if model is None:
            self.check_password(password, _DUMMY_HASH)
            return None
        if not self.check_password(password, model.password_hash):
            return None
        return model_to_user(model)

    def set_reset_token(self, user_id: str, token_digest: str, expires_at: str) -> None:
        """Store a pending reset token digest and its expiry."""
        model = self._get_model(user_id)
        if model is None:
            return
        model.password_reset_token = token_digest
        model.password_reset_expires = expires_at
        model.updated_at = _now_iso()
        commit(self.db)

    def get_by_reset_token(self, token_digest: str) -> Optional[User]:
        model = (
            self.db.query(UserModel)
            .filter(UserModel.password_reset_token == token_digest)
            .first()
        )
        if model:
            return model_to_user(model)
        return None

    def complete_password_reset(
        self, user_id: str, token_digest: str, new_password: str
    ) -> bool:
        """Replace the password and clear the reset fields in one statement.

        The update only matches while the row still holds ``token_digest``,
        so two concurrent resets with the same token cannot both succeed.

        Returns:
            True if this call consumed the token.
        """
        check_password_strength(new_password)
        updated = (
            self.db.query(UserModel)
            .filter(
                UserModel.user_id == user_id,
                UserModel.password_reset_token == token_digest,
            )
            .update(
                {
                    UserModel.password_hash: self.hash_password(new_password),
                    UserModel.password_reset_token: None,
                    UserModel.password_reset_expires: None,
                    UserModel.updated_at: _now_iso(),
                },
                synchronize_session=False,
            )
        )
        commit(self.db)
        return updated == 1
