"""Shared helpers for route blueprints."""

from __future__ import annotations

from urllib.parse import urlparse

from flask import jsonify, redirect, request, url_for

__all__ = ["json_error", "safe_redirect", "wants_json_response"]


def safe_redirect(referrer: str | None, fallback_endpoint: str, **values):
    """Redirect to referrer when it matches the current host, otherwise fallback."""
    if not referrer:
        return redirect(url_for(fallback_endpoint, **values))
    ref_url = urlparse(request.host_url)
    test_url = urlparse(referrer)
    if test_url.scheme in ("http", "https") and ref_url.netloc == test_url.netloc:
        return redirect(referrer)
    return redirect(url_for(fallback_endpoint, **values))


def wants_json_response() -> bool:
    """Return True when the current request expects a JSON response.

    A request without an Accept header is treated as a browser request.
    """
    return (
        request.is_json
        or request.headers.get("X-Requested-With", "").lower() == "xmlhttprequest"
        or request.accept_mimetypes.best == "application/json"
    )


def json_error(message: str, *, status: int = 400, **extra):
    """Return a JSON error payload."""
    payload = {"success": False, "message": message}
    payload.update(extra)
    return jsonify(payload), status
