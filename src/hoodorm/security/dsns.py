"""Connection source parsing and redaction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

from .redaction import REDACTED_VALUE, redact_conninfo, redact_query_params


@dataclass
class DSNConfig:
    """
    Components of a URL-style source such as ``postgres://user:pw@host/db``.
    """

    driver: str
    username: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    path: str = ""
    query: dict[str, str] = field(default_factory=dict)

    def _netloc(self) -> str:
        credentials = ""
        if self.username:
            credentials = self.username
            if self.password:
                credentials += f":{REDACTED_VALUE}"
            credentials += "@"
        address = self.host or ""
        if self.port:
            address += f":{self.port}"
        return credentials + address

    def redacted(self) -> str:
        """
        Return the DSN with the password and sensitive options masked.
        """
        # assembled by hand so ``sqlite:///path`` keeps its empty authority
        result = f"{self.driver}://{self._netloc()}{self.path}"
        if self.query:
            result += "?" + urlencode(redact_query_params(self.query), safe="*")
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlsplit(dsn)
    if not parsed.scheme:
        raise ValueError(f"Connection source {dsn!r} is not a URL")
    return DSNConfig(
        driver=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=parsed.port,
        database=parsed.path.lstrip("/") or None,
        path=parsed.path,
        query=dict(parse_qsl(parsed.query)),
    )


def redact_source(source: str) -> str:
    """
    Redact any connection source: URL DSNs, libpq strings or file paths.
    """
    if "://" in source:
        return parse_dsn(source).redacted()
    return redact_conninfo(source)
