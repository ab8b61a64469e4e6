from enum import IntEnum
from typing import Optional
from pydantic import field_validator
from models.record import ApiRecord


class Role(IntEnum):
    ADMIN = 0
    CHEF = 1
    WAITER = 2
    POS_ADMIN = 3
    CUSTOMER = 4

    @property
    def wire_name(self) -> str:
        return ROLE_WIRE_NAMES[self]

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Accept 2, "2", "waiter" or a Role; None when unknown."""
        if value is None or value == "":
            return None
        if isinstance(value, Role):
            return value
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            return WIRE_NAME_ROLES.get(value.strip().lower())
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None


ROLE_WIRE_NAMES = {
    Role.ADMIN: "admin",
    Role.CHEF: "chef",
    Role.WAITER: "waiter",
    Role.POS_ADMIN: "pos-admin",
    Role.CUSTOMER: "customer",
}
WIRE_NAME_ROLES = {name: role for role, name in ROLE_WIRE_NAMES.items()}

ROLE_DISPLAY_NAMES = {
    Role.ADMIN: "Admin",
    Role.CHEF: "Chef",
    Role.WAITER: "Waiter",
    Role.POS_ADMIN: "POS Admin",
    Role.CUSTOMER: "Customer",
}


def role_name(role) -> str:
    return ROLE_DISPLAY_NAMES.get(Role.parse(role), "Unknown")


class User(ApiRecord):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None
    role_name: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value):
        return Role.parse(value)


class LoginResult(ApiRecord):
    token: str
    user: Optional[User] = None

    @property
    def role(self) -> Optional[Role]:
        return self.user.role if self.user else None
