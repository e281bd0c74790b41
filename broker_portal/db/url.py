from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_SSL_DISABLED = {"0", "false", "no", "off", "disable"}
_SSL_MODES = {"require", "verify-ca", "verify-full"}


def normalize_database_url(url: str) -> str:
    """Coerce postgres URLs onto the async psycopg driver.

    Hosted providers hand out ``postgres://`` or ``postgresql+asyncpg://`` URLs with an
    ``ssl=`` flag; psycopg wants ``sslmode=`` instead.
    """
    url = (url or "").strip()
    if not url:
        return url

    parts = urlsplit(url)
    scheme = parts.scheme
    if scheme in {"postgres", "postgresql", "postgresql+asyncpg"}:
        scheme = "postgresql+psycopg"

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    ssl_key = next((key for key in query if key.lower() == "ssl"), None)
    if ssl_key is not None:
        ssl_val = query.pop(ssl_key).lower().strip()
        if "sslmode" not in query:
            if ssl_val in _SSL_DISABLED:
                query["sslmode"] = "disable"
            elif ssl_val in _SSL_MODES:
                query["sslmode"] = ssl_val
            else:
                query["sslmode"] = "require"

    return urlunsplit((scheme, parts.netloc, parts.path, urlencode(query, doseq=True), parts.fragment))
