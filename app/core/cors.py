# app/core/cors.py

from typing import Iterable, Optional


def is_origin_allowed(origin: Optional[str], allowed_origins: Iterable[str]) -> bool:
    """
    Requests without an Origin header (curl, mobile apps, server-to-server)
    are always allowed; browser requests must match the allow-list exactly.
    """
    if not origin:
        return True
    return origin.rstrip("/") in {o.rstrip("/") for o in allowed_origins}
