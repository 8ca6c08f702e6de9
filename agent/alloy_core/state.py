"""
Credentials and Token — the only state a run carries.

One Token instance is created empty per run and passed by reference to
every API call, so a refresh done by one call is seen by the next.
Single-threaded: no locks needed.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str = field(repr=False)

    def grant_payload(self, grant_type):
        return {
            "grant_type": grant_type,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }


@dataclass
class Token:
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[float] = None   # seconds
    issued_at: Optional[float] = None    # unix seconds

    def is_complete(self) -> bool:
        return (
            bool(self.access_token)
            and bool(self.token_type)
            and self.expires_in is not None
            and self.issued_at is not None
        )

    def is_valid(self, now: float) -> bool:
        """True while every field is set and `now` is before expiry."""
        return self.is_complete() and now < self.issued_at + self.expires_in

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.access_token}"

    def store(self, grant, issued_at):
        """Fill in place from a token-grant response body."""
        self.access_token = grant.get("access_token")
        self.token_type = grant.get("token_type")
        expires_in = grant.get("expires_in")
        self.expires_in = float(expires_in) if expires_in is not None else None
        self.issued_at = issued_at

    def clear(self):
        self.access_token = None
        self.token_type = None
        self.expires_in = None
        self.issued_at = None
