"""Derive the rate-limit identity of an HTTP caller."""

from __future__ import annotations

from starlette.requests import HTTPConnection

UNKNOWN_IDENTITY = "unknown"


def client_identity(request: HTTPConnection) -> str:
    """Return the caller's network identity.

    Order: first non-empty ``X-Forwarded-For`` entry, ``X-Real-IP``, the
    direct peer address, then ``"unknown"``. Rotating addresses simply get
    more allowance.
    """

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        for entry in forwarded.split(","):
            entry = entry.strip()
            if entry:
                return entry

    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_IDENTITY
