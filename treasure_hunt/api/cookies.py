"""Mirror session cache changes onto response cookies"""
from fastapi import Response

from treasure_hunt.core.session_cache import SessionCache


COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # one hunt season


def apply_cookie_changes(response: Response, cache: SessionCache) -> None:
    for key, value in cache.pending_changes().items():
        if value is None:
            response.delete_cookie(key)
        else:
            response.set_cookie(key, value, max_age=COOKIE_MAX_AGE, httponly=True, samesite="lax")
