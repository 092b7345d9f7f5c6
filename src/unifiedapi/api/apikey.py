"""Per-site shared-secret validation for the visitor logging routes."""

from __future__ import annotations

import hmac

from fastapi import HTTPException, Path, Request

API_KEY_HEADER = "x-api-key"


def require_site_key(request: Request, site: str = Path(...)) -> str:
    """FastAPI dependency: validate the x-api-key header for a site.

    Returns:
        The validated site id.

    Raises:
        HTTPException: 400 for an unknown site, 403 for a wrong key.
    """
    site_keys: dict[str, str] = request.app.state.settings.site_api_keys
    expected = site_keys.get(site)
    if expected is None:
        raise HTTPException(status_code=400, detail="Unknown site")

    supplied = request.headers.get(API_KEY_HEADER, "")
    if not hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=403, detail="Invalid API Key")

    return site
