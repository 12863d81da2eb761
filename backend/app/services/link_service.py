"""
Canonical advert URLs and best-effort short links.

Short links come from the Bitly v4 API. A successful result is cached on
the advert; any failure falls back to the canonical URL.
"""
import logging

import httpx
from sqlalchemy.orm import Session

from app.config import settings
from app.models.advert import Advert
from app.services.advert_service import save
from app.utils.text import parameterize

logger = logging.getLogger("app")


def advert_slug(advert: Advert) -> str:
    return "%d-%s" % (advert.id, parameterize(advert.job_title or ""))


def advert_url(advert: Advert, host: str | None = None) -> str:
    base = (host or settings.default_url_host).rstrip("/")
    return f"{base}/adverts/{advert_slug(advert)}"


class ShortLinkClient:
    def __init__(
        self,
        access_token: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = access_token if access_token is not None else settings.bitly_access_token
        self.api_url = api_url or settings.bitly_api_url
        self.timeout = timeout or settings.short_link_timeout
        self._transport = transport

    async def shorten(self, long_url: str) -> str:
        """Return the shortened URL.

        Raises:
            httpx.HTTPError: If the request fails or the service rejects it.
            ValueError: If no access token is configured or the response
                carries no link.
        """
        if not self.access_token:
            raise ValueError("No short-link access token configured")
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            resp = await client.post(
                self.api_url,
                json={"long_url": long_url},
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
            resp.raise_for_status()
            link = resp.json().get("link")
        if not link:
            raise ValueError("Short-link response carried no link")
        return link


async def short_url(db: Session, advert: Advert, client: ShortLinkClient | None = None) -> str:
    if advert.short_url_cache:
        return advert.short_url_cache

    canonical = advert_url(advert)
    client = client or ShortLinkClient()
    try:
        link = await client.shorten(canonical)
        advert.short_url_cache = link
        save(db, advert)
    except Exception as exc:
        # network, auth and service errors all land here
        logger.warning("Short link for advert %s failed, using canonical URL: %s", advert.id, exc)
        db.rollback()
        return canonical
    return link
