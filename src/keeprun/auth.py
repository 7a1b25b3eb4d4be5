"""Identity verification for tokens minted by the external identity provider.

Keep Run never stores credentials. Each request carries the provider's
HS256 access token; the ``sub`` claim becomes the local user id.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

from jose import JWTError, jwt

from .errors import Unauthorized


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class IdentityVerifier:
    """Decode and validate bearer tokens."""

    def __init__(
        self,
        secret: str,
        *,
        audience: Optional[str] = "authenticated",
        algorithms: Sequence[str] = ("HS256",),
    ):
        self.secret = secret
        self.audience = audience
        self.algorithms = list(algorithms)

    def verify(self, token: Optional[str]) -> Identity:
        """Return the identity inside ``token``.

        Raises:
            Unauthorized: the token is missing, expired, forged or lacks
                the subject/email claims
        """
        if not token or not self.secret:
            raise Unauthorized()
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as exc:
            raise Unauthorized() from exc

        user_id = claims.get("sub")
        email = claims.get("email")
        if not user_id or not email:
            raise Unauthorized()
        metadata = claims.get("user_metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        return Identity(
            user_id=str(user_id),
            email=str(email),
            name=metadata.get("name"),
            avatar_url=metadata.get("avatar_url"),
        )

    def issue(
        self,
        user_id: str,
        email: str,
        *,
        expires_in: timedelta = timedelta(hours=1),
        **metadata: Any,
    ) -> str:
        """Mint a token the way the identity provider would (dev and tests)."""

        now = datetime.now(timezone.utc)
        claims: dict[str, Any] = {
            "sub": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_in).timestamp()),
            "user_metadata": metadata,
        }
        if self.audience is not None:
            claims["aud"] = self.audience
        return jwt.encode(claims, self.secret, algorithm=self.algorithms[0])


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer ...`` header."""

    if not header_value:
        return None
    scheme, _, token = header_value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


__all__ = ["Identity", "IdentityVerifier", "bearer_token"]
