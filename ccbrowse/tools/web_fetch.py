from __future__ import annotations

import contextlib
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class ChangelogError(RuntimeError):
    pass


class FetchFailed(ChangelogError):
    """The server answered with a non-success status."""

    def __init__(self, status: int) -> None:
        super().__init__(f"Failed to fetch changelog: {status}")
        self.status = status


class NetworkError(ChangelogError):
    """The request never got an HTTP answer (DNS, refused, timeout...)."""


@dataclass
class WebFetcher:
    timeout: float = 30.0
    user_agent: str = "ccbrowse"

    def fetch_text(self, url: str, timeout: float | None = None) -> str:
        # Single attempt; callers decide whether to try again.
        req = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
        logger.debug("GET %s", url)
        try:
            with contextlib.closing(urllib.request.urlopen(req, timeout=timeout or self.timeout)) as response:
                status = getattr(response, "status", 200)
                if status >= 400:
                    raise FetchFailed(status)
                return response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            logger.warning("GET %s answered %s", url, exc.code)
            raise FetchFailed(exc.code) from exc
        except (urllib.error.URLError, OSError) as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise NetworkError(f"Network error while fetching {url}: {exc}") from exc
