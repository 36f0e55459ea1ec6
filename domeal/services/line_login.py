"""LINE Login OAuth code exchange."""

import logging
from dataclasses import dataclass

import httpx
from jose import JWTError, jwt

from domeal.config import get_settings
from domeal.errors import ConfigError, TransportError, ValidationError

logger = logging.getLogger(__name__)

LINE_TOKEN_URL = "https://api.line.me/oauth2/v2.1/token"


@dataclass
class LineTokens:
    """Token response from the LINE token endpoint."""

    access_token: str
    id_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


class LineLoginClient:
    """Exchanges authorization codes for LINE tokens."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.timeout = 10.0

    def _require_config(self) -> tuple[str, str, str]:
        client_id = self.settings.line_client_id
        client_secret = self.settings.line_client_secret
        redirect_uri = self.settings.line_redirect_uri
        if not (client_id and client_secret and redirect_uri):
            raise ConfigError("LINE login is not configured")
        return client_id, client_secret, redirect_uri

    async def exchange_code(self, code: str) -> LineTokens:
        """Exchange an authorization code for an access/ID token pair."""
        client_id, client_secret, redirect_uri = self._require_config()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    LINE_TOKEN_URL,
                    data={
                        "grant_type": "authorization_code",
                        "code": code,
                        "redirect_uri": redirect_uri,
                        "client_id": client_id,
                        "client_secret": client_secret,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling LINE token endpoint: {e}")
            raise TransportError("Failed to send request to LINE") from e

        if response.status_code != httpx.codes.OK:
            logger.error(f"LINE token endpoint error: {response.text}")
            raise TransportError("LINE token request failed")

        data = response.json()
        if not data.get("access_token") or not data.get("id_token"):
            raise TransportError("LINE token response is missing tokens")

        return LineTokens(
            access_token=data["access_token"],
            id_token=data["id_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
        )


def decode_id_token(id_token: str) -> dict:
    """Read the claims of a LINE ID token.

    The token comes straight from LINE over TLS in the code exchange, so the
    signature is not verified here.
    """
    try:
        claims = jwt.get_unverified_claims(id_token)
    except JWTError as e:
        raise ValidationError("Failed to parse id_token") from e

    if not isinstance(claims.get("sub"), str) or not claims["sub"]:
        raise ValidationError("Invalid LINE ID")
    return claims


def get_line_login_client() -> LineLoginClient:
    """Get a LINE login client instance."""
    return LineLoginClient()
