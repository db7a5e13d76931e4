from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class TokenClaims:
    """The subset of ID-token claims the access gate consumes."""

    email: str
    email_verified: bool
    hosted_domain: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class Identity(BaseModel):
    """Authenticated caller, attached to the request by the access gate."""

    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
