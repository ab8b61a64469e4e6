# core/user_service.py
import logging
import re

from core.errors import ValidationError
from models.user import LoginResult, Role, User

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
MIN_PASSWORD_LENGTH = 6


def is_valid_email(email_str: str) -> bool:
    """Check if email format is valid"""
    return re.match(EMAIL_PATTERN, email_str or "") is not None


def validate_credentials(email: str, password: str, name: str = None, signup: bool = False):
    if signup and not (name or "").strip():
        raise ValidationError("Name is required", field="name")
    if not is_valid_email((email or "").strip()):
        raise ValidationError("Please enter a valid email address", field="email")
    if signup and len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password")
    if not password:
        raise ValidationError("Password is required", field="password")


def login(api, email: str, password: str) -> LoginResult:
    """POST /users/login. A RoleNotAssignedError means the account awaits a role."""
    validate_credentials(email, password)
    data = api.post("/users/login", json={"email": email.strip(), "password": password})
    return LoginResult.model_validate(data)


def signup(api, name: str, email: str, password: str) -> str:
    """POST /users/signup, returns the new account's token (no role yet)."""
    validate_credentials(email, password, name=name, signup=True)
    data = api.post("/users/signup", json={"name": name.strip(), "email": email.strip(), "password": password})
    return data["token"]


def get_me(api) -> User:
    return User.model_validate(api.get("/users/me"))


def list_users(api):
    data = api.get("/users")
    # Some deployments wrap the list: {users: [...]}
    if isinstance(data, dict):
        data = data.get("users", [])
    return [User.model_validate(u) for u in data or []]


def update_user_role(api, user_id: int, role: Role) -> User:
    role = Role.parse(role)
    if role is None:
        raise ValidationError("Please select a role", field="role")
    data = api.put("/users/role", json={"userId": user_id, "role": role.wire_name})
    logger.info("Role of user %s set to %s", user_id, role.wire_name)
    if isinstance(data, dict) and "user" in data:
        data = data["user"]
    return User.model_validate(data)
