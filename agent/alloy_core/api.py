"""
Alloy API invoker — every call to the server goes through invoke().

A logical call runs in two phases on each attempt:
  1. ensure-token: if the shared Token is not valid at this attempt's
     clock snapshot, POST /token (client credentials) and fill it in place;
  2. request: send the real call with the Authorization header.

Transport failures and non-2xx statuses are retried with a fixed
RETRY_DELAY_SEC wait between attempts. max_tries <= 0 means no limit.
The token grant keeps its own attempt budget. A success=false envelope
is NOT retried here; callers inspect it.
"""

import time

import requests

from .config import log
from .constants import RETRY_DELAY_SEC, TOKEN_ENDPOINT, GRANT_TYPE
from .errors import ApiHttpError, ApiInterruptedError, TokenGrantError
from . import http_client


def build_url(base_url, endpoint):
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def _is_success(resp):
    return 200 <= resp.status_code < 300


def _attempts_left(attempt, max_tries):
    return max_tries is None or max_tries <= 0 or attempt < max_tries


def _decode(resp):
    """JSON object of a successful response, or None when empty/undecodable."""
    if not resp.content:
        return None
    try:
        body = resp.json()
    except ValueError:
        log.warning("Non-JSON response from %s: %s", resp.url, resp.text[:200])
        return None
    if not isinstance(body, dict):
        log.warning("Response from %s is not a JSON object: %s", resp.url, resp.text[:200])
        return None
    return body


def _send_with_retry(method, url, prepare, max_tries, timeout, label):
    """
    Send until a 2xx response arrives or max_tries attempts are used.

    prepare(now) runs at the start of every attempt with that attempt's
    clock snapshot and returns extra kwargs for session.request().
    Returns (response, attempt_started_at).
    """
    attempt = 0
    last_response = None
    last_error = None

    while True:
        attempt += 1
        started = time.time()
        kwargs = prepare(started)
        try:
            resp = http_client.http.request(method, url, timeout=timeout, **kwargs)
        except requests.RequestException as e:
            last_response, last_error = None, e
            log.warning("%s error (attempt %d): %s", label, attempt, e)
            if isinstance(e, requests.ConnectionError) and _attempts_left(attempt, max_tries):
                # Drop pooled connections that may have gone stale
                http_client.http = http_client.reset_session(http_client.http)
        else:
            if _is_success(resp):
                return resp, started
            last_response, last_error = resp, None
            log.warning("%s failed (attempt %d): HTTP %d — %s",
                        label, attempt, resp.status_code, resp.text[:200])

        if not _attempts_left(attempt, max_tries):
            break
        time.sleep(RETRY_DELAY_SEC)

    log.error("%s FAILED after %d attempts", label, attempt)
    if last_response is not None:
        raise ApiHttpError(last_response.status_code, last_response.reason or "", url)
    raise ApiInterruptedError(f"{label}: no response from {url} ({last_error})") from last_error


# ─── Token grant ─────────────────────────────────────────────────

def grant_token(credentials, token, base_url, max_tries=0, timeout=None):
    """POST /token and store the result in `token` (mutated in place)."""
    url = build_url(base_url, TOKEN_ENDPOINT)
    payload = credentials.grant_payload(GRANT_TYPE)

    log.info("Requesting access token for client %s", credentials.client_id)
    resp, started = _send_with_retry(
        "POST", url, lambda now: {"json": payload}, max_tries, timeout, "Token grant",
    )

    grant = _decode(resp)
    if not isinstance(grant, dict):
        raise TokenGrantError("Token grant returned no JSON object")
    try:
        # issued_at is the start of the attempt that succeeded
        token.store(grant, issued_at=started)
    except (TypeError, ValueError) as e:
        token.clear()
        raise TokenGrantError(f"Token grant returned a bad expires_in: {e}") from e
    if not token.is_complete():
        token.clear()
        raise TokenGrantError("Token grant response is missing access_token/token_type/expires_in")

    log.info("Access token acquired (type=%s, expires in %ds)", token.token_type, token.expires_in)
    return token


# ─── Invoker ─────────────────────────────────────────────────────

def invoke(credentials, token, base_url, endpoint, params=None,
           method="POST", max_tries=0, timeout=None):
    """
    Call `method base_url/endpoint` with JSON `params`, acquiring or
    renewing `token` first when needed. Returns the decoded JSON body
    (None when the body is empty or not a JSON object).

    Raises ApiHttpError / ApiInterruptedError when retries run out and
    TokenGrantError when the grant answers without a usable token.
    """
    url = build_url(base_url, endpoint)
    label = f"{method} {endpoint}"

    def authorize(now):
        if not token.is_valid(now):
            grant_token(credentials, token, base_url, max_tries, timeout)
        return {
            "json": params,
            "headers": {"Authorization": token.authorization},
        }

    resp, _ = _send_with_retry(method, url, authorize, max_tries, timeout, label)
    log.debug("%s → HTTP %d", label, resp.status_code)
    return _decode(resp)
