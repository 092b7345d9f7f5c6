"""Best-effort IP geolocation.

GeoLocator.lookup_country() never raises: any transport error, timeout,
non-2xx status or unparseable body yields "Unknown". There are no retries.
"""

from __future__ import annotations

import requests

from unifiedapi.observability.logging import get_logger
from unifiedapi.observability.redaction import safe_log_context

logger = get_logger(__name__)

UNKNOWN_COUNTRY = "Unknown"


class GeoLocator:
    def __init__(
        self,
        url_template: str = "https://ipapi.co/{ip}/json/",
        *,
        timeout: float = 2.0,
        session: requests.Session | None = None,
    ) -> None:
        self._url_template = url_template
        self._timeout = timeout
        self._session = session or requests.Session()

    def lookup_country(self, ip: str | None) -> str:
        """Country name for an IP address, or "Unknown"."""
        if not ip:
            return UNKNOWN_COUNTRY

        try:
            resp = self._session.get(self._url_template.format(ip=ip), timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning(
                "geo lookup failed",
                extra={"extra_fields": safe_log_context(ip=ip, error=type(exc).__name__)},
            )
            return UNKNOWN_COUNTRY

        country = data.get("country_name") if isinstance(data, dict) else None
        if not country or not isinstance(country, str):
            return UNKNOWN_COUNTRY
        return country
