"""
HTTP session with connection pooling and SSL CA bundle resolution.

Retries are owned by api.invoke() (fixed delay, exact attempt count), so
the adapter's urllib3 Retry is switched off: one session call = one
network attempt, and error statuses come back as responses.
"""

import os

import certifi
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import BASE_DIR, log

_retry_strategy = Retry(
    total=0,
    connect=0,
    read=0,
    redirect=3,
    raise_on_status=False,
)


def _get_ca_bundle():
    """Get the CA bundle path.

    Priority: permanent copy in the agent folder → env var → certifi.
    """
    permanent = BASE_DIR / "cacert.pem"
    if permanent.is_file():
        return str(permanent)
    env_ca = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    return certifi.where()


def create_session():
    """Create a new requests.Session with connection pooling and SSL."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=3,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})
    session.verify = _get_ca_bundle()
    return session


def reset_session(session):
    """Close and recreate the HTTP session (fixes stale connections)."""
    try:
        session.close()
    except (OSError, requests.RequestException) as e:
        log.debug("Closing stale session failed: %s", e)
    return create_session()


# Global shared session
http = create_session()
