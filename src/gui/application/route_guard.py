"""
Route guard and route table.

Pure functions of the current session: no I/O, no side effects.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from src.domain.job_board_entities import Session
from src.domain.job_board_value_objects import RouteDecision, UserRole

LOGIN_ROUTE = "/login"
REGISTER_ROUTE = "/register"
DEFAULT_ROUTE = "/dashboard"
ADMIN_ROUTE = "/admin/dashboard"


@dataclass(frozen=True)
class RouteSpec:
    """Access requirements of a route."""
    protected: bool = False
    requires_admin: bool = False


ROUTES: Dict[str, RouteSpec] = {
    LOGIN_ROUTE: RouteSpec(),
    REGISTER_ROUTE: RouteSpec(),
    DEFAULT_ROUTE: RouteSpec(protected=True),
    ADMIN_ROUTE: RouteSpec(protected=True, requires_admin=True),
}


def evaluate(session: Optional[Session], requires_admin: bool = False) -> RouteDecision:
    """
    Decide whether a protected view may render.

    Args:
        session: Current session, or None when logged out
        requires_admin: Whether the view is admin-only

    Returns:
        REDIRECT_LOGIN without a session, REDIRECT_DEFAULT for a non-admin
        on an admin view, ALLOW otherwise
    """
    if session is None:
        return RouteDecision.REDIRECT_LOGIN
    if requires_admin and session.role != UserRole.ADMIN:
        return RouteDecision.REDIRECT_DEFAULT
    return RouteDecision.ALLOW


def landing_route(role: UserRole) -> str:
    """Route shown right after login."""
    return ADMIN_ROUTE if role == UserRole.ADMIN else DEFAULT_ROUTE


def resolve(path: str, session: Optional[Session]) -> str:
    """
    Return the path that is actually shown when navigating to ``path``.

    "/" and unknown paths go to the login page. Protected paths are
    guarded; a redirect target is not guarded again.
    """
    route = ROUTES.get(path)
    if route is None:
        return LOGIN_ROUTE
    if not route.protected:
        return path

    decision = evaluate(session, route.requires_admin)
    if decision == RouteDecision.REDIRECT_LOGIN:
        return LOGIN_ROUTE
    if decision == RouteDecision.REDIRECT_DEFAULT:
        return DEFAULT_ROUTE
    return path
