# core/route_guard.py
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, quote, urlsplit

from models.user import Role

LOGIN_ROUTE = "/login"
SIGNUP_ROUTE = "/signup"
LOGOUT_ROUTE = "/logout"
ONBOARDING_ROUTE = "/new-user"
PUBLIC_MENU_ROUTE = "/menu"
GUEST_ROUTES = (LOGIN_ROUTE, SIGNUP_ROUTE)

ROLE_HOME = {
    Role.ADMIN: "/admin/dashboard",
    Role.CHEF: "/chef",
    Role.WAITER: "/waiter",
    Role.POS_ADMIN: "/pos",
}

# Longest prefix first
ROUTE_ROLES = (
    ("/admin", {Role.ADMIN}),
    ("/pos", {Role.ADMIN, Role.POS_ADMIN}),
    ("/chef", {Role.CHEF, Role.ADMIN}),
    ("/waiter", {Role.WAITER, Role.ADMIN}),
)


@dataclass
class RouteDecision:
    route: str
    redirect: bool = False
    next: Optional[str] = None


def home_for(role) -> str:
    return ROLE_HOME.get(Role.parse(role), PUBLIC_MENU_ROUTE)


def _path(route: str) -> str:
    path = urlsplit(route or "/").path or "/"
    return path.rstrip("/") or "/"


def is_public(path: str) -> bool:
    return path == PUBLIC_MENU_ROUTE or path.startswith("/table/")


def roles_for(path: str):
    for prefix, roles in ROUTE_ROLES:
        if path == prefix or path.startswith(prefix + "/"):
            return roles
    return None


def login_redirect(route: str) -> RouteDecision:
    return RouteDecision(f"{LOGIN_ROUTE}?next={quote(route, safe='/')}", redirect=True, next=route)


def next_from(route: str) -> Optional[str]:
    values = parse_qs(urlsplit(route or "").query).get("next")
    return values[0] if values else None


def resolve_route(route: str, session) -> RouteDecision:
    """Where a navigation to `route` should end up for the current session."""
    path = _path(route)
    authenticated = session.is_valid()
    role = session.role if authenticated else None

    if path == LOGOUT_ROUTE or is_public(path):
        return RouteDecision(route)

    if not authenticated:
        if path in GUEST_ROUTES or path == ONBOARDING_ROUTE:
            return RouteDecision(route)
        if path == "/":
            return RouteDecision(LOGIN_ROUTE, redirect=True)
        return login_redirect(route)

    if role is None:
        # Signed up, waiting for an admin to assign a role
        if path in (ONBOARDING_ROUTE, LOGIN_ROUTE):
            return RouteDecision(route)
        return RouteDecision(ONBOARDING_ROUTE, redirect=True)

    home = home_for(role)
    if path in GUEST_ROUTES or path in (ONBOARDING_ROUTE, "/"):
        return RouteDecision(home, redirect=True)

    allowed = roles_for(path)
    if allowed is None or role not in allowed:
        return RouteDecision(home, redirect=path != home)
    return RouteDecision(route)


def post_login_target(session, next_path: str = None) -> str:
    """Route to open after a successful login."""
    if session.role is None:
        return ONBOARDING_ROUTE
    if next_path:
        decision = resolve_route(next_path, session)
        if not decision.redirect:
            return next_path
    return home_for(session.role)
