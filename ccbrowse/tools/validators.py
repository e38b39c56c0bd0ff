from __future__ import annotations

from urllib.parse import urlparse


def validate_url(url: str) -> None:
    p = urlparse(url)
    if p.scheme not in {"http", "https"} or not p.netloc:
        raise ValueError(f"Invalid URL: {url}. Expected http(s)://host[/path]")


def require_non_negative(name: str, value: int | None) -> None:
    if value is not None and value < 0:
        raise ValueError(f"{name} must not be negative (got {value})")
