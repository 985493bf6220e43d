"""
Single entrypoint Lambda that routes HTTP API requests to thin handler modules.

Why one Lambda?
- Keeps warm caches (report cache, DB pool, auth clients) across routes.
- Simpler to deploy while still keeping code organized by delegating to modules.
"""

from typing import Callable, Dict, List, Optional, Tuple

from utils.error_handling import json_response

from . import admin_agents, auth, customers, email_settings, health_check, reports, team, tickets

# (method, path template, handler). Templates use {name} for path parameters.
ROUTES: Tuple[Tuple[str, str, Callable], ...] = (
    ("GET", "/health", health_check.lambda_handler),
    ("POST", "/api/auth/login", auth.login_handler),
    ("POST", "/api/auth/logout", auth.logout_handler),
    ("GET", "/api/auth/me", auth.me_handler),
    ("GET", "/api/tickets", tickets.list_handler),
    ("POST", "/api/tickets", tickets.create_handler),
    ("GET", "/api/tickets/{id}", tickets.get_handler),
    ("PATCH", "/api/tickets/{id}", tickets.update_handler),
    ("GET", "/api/tickets/{id}/messages", tickets.list_messages_handler),
    ("POST", "/api/tickets/{id}/messages", tickets.add_message_handler),
    ("GET", "/api/customers", customers.list_handler),
    ("POST", "/api/customers", customers.create_handler),
    ("GET", "/api/reports", reports.report_handler),
    ("GET", "/api/dashboard", reports.dashboard_handler),
    ("GET", "/api/team", team.list_handler),
    ("PATCH", "/api/team/{id}", team.update_role_handler),
    ("POST", "/api/team/{id}/password-reset", team.password_reset_handler),
    ("PATCH", "/api/profile", team.update_profile_handler),
    ("GET", "/api/settings/email", email_settings.get_handler),
    ("PUT", "/api/settings/email", email_settings.save_handler),
    ("POST", "/api/settings/email/test", email_settings.test_handler),
    ("POST", "/api/admin/agents", admin_agents.create_handler),
    ("DELETE", "/api/admin/agents/{id}", admin_agents.delete_handler),
)


def _segments(path: str) -> List[str]:
    return [part for part in path.strip("/").split("/") if part]


def match_path(template: str, path: str) -> Optional[Dict[str, str]]:
    """Return captured path parameters when ``path`` fits ``template``, else None."""
    expected = _segments(template)
    actual = _segments(path)
    if len(expected) != len(actual):
        return None

    params: Dict[str, str] = {}
    for pattern, value in zip(expected, actual):
        if pattern.startswith("{") and pattern.endswith("}"):
            params[pattern[1:-1]] = value
        elif pattern != value:
            return None
    return params


def resolve(method: str, path: str) -> Tuple[Optional[Callable], Dict[str, str], bool]:
    """Find the handler for a request; the flag says whether the path exists at all."""
    path_known = False
    for route_method, template, handler in ROUTES:
        params = match_path(template, path)
        if params is None:
            continue
        path_known = True
        if route_method == method:
            return handler, params, True
    return None, {}, path_known


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    The event contains the HTTP method and path; we route it to the correct
    handler and expose template captures as ``pathParameters``.
    """
    http = event.get("requestContext", {}).get("http", {})
    method = (http.get("method") or "").upper()
    path = http.get("path") or event.get("rawPath") or ""

    handler, params, path_known = resolve(method, path)
    if handler is None:
        if path_known:
            return json_response(405, {"message": "Method not allowed", "route": f"{method} {path}"})
        return json_response(404, {"message": "Route not found", "route": f"{method} {path}"})

    if params:
        event = dict(event)
        event["pathParameters"] = {**(event.get("pathParameters") or {}), **params}
    return handler(event, context)
