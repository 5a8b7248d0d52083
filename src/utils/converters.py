"""Conversions between pydantic domain objects and ORM models."""

from models.user import UserModel
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(**user.model_dump())


def model_to_user(model: UserModel) -> User:
    return User.model_validate(model, from_attributes=True)
