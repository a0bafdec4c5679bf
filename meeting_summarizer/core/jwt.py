"""JWT verification for bearer access tokens.

HS256 tokens are checked against the shared secret; RS256 and ES256 tokens
against the issuer's published key set.
"""

import base64
from typing import Any, Dict, List, Optional, Union

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from pydantic import ValidationError as PydanticValidationError

from meeting_summarizer.core.config import AuthSettings
from meeting_summarizer.core.jwks import JWKKey, JWKSService
from meeting_summarizer.schemas.auth import JWTClaims
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

ASYMMETRIC_ALGORITHMS = ("RS256", "ES256")

EC_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


def _base64url_decode(value: str) -> bytes:
    if not value:
        return b""
    padding = -len(value) % 4
    return base64.urlsafe_b64decode(value + "=" * padding)


def _b64_int(value: str) -> int:
    return int.from_bytes(_base64url_decode(value), byteorder="big")


def jwk_to_pem(jwk_key: JWKKey) -> str:
    """Convert an RSA or EC JWK to a PEM public key for PyJWT.

    Raises:
        ValueError: If the key type or curve is unsupported
    """
    if jwk_key.kty == "RSA":
        public_key = rsa.RSAPublicNumbers(_b64_int(jwk_key.e), _b64_int(jwk_key.n)).public_key()
    elif jwk_key.kty == "EC":
        curve = EC_CURVES.get(jwk_key.crv or "")
        if curve is None:
            raise ValueError(f"Unsupported curve: {jwk_key.crv}")
        public_key = ec.EllipticCurvePublicNumbers(
            x=_b64_int(jwk_key.x), y=_b64_int(jwk_key.y), curve=curve()
        ).public_key()
    else:
        raise ValueError(f"Unsupported key type: {jwk_key.kty}")

    pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem.decode("utf-8")


class JWTVerifier:
    """Verifier for bearer access tokens."""

    def __init__(
        self,
        issuer: str = "",
        jwt_secret: str = "",
        audience: str = "",
        jwks_service: Optional[JWKSService] = None,
    ):
        """Initialize JWT verifier.

        Args:
            issuer: Expected ``iss`` claim, checked when set
            jwt_secret: Shared secret for HS256 tokens
            audience: Expected ``aud`` claim, checked when set
            jwks_service: Key source for RS256/ES256 tokens
        """
        self.issuer = issuer
        self.jwt_secret = jwt_secret
        self.audience = audience
        self.jwks_service = jwks_service

        if not issuer:
            LOGGER.warning("AUTH_ISSUER is not configured, token issuer will not be checked")
        LOGGER.info(f"JWT verifier initialized for issuer: {issuer or '<any>'}")

    @classmethod
    def from_settings(cls, auth_settings: AuthSettings) -> "JWTVerifier":
        jwks_url = auth_settings.resolved_jwks_url
        jwks_service = JWKSService(jwks_url, cache_ttl=auth_settings.jwks_cache_ttl) if jwks_url else None
        return cls(
            issuer=auth_settings.issuer,
            jwt_secret=auth_settings.jwt_secret,
            audience=auth_settings.audience,
            jwks_service=jwks_service,
        )

    async def verify_token(self, token: str) -> JWTClaims:
        """Verify and decode an access token.

        Raises:
            jwt.InvalidTokenError: If the token is malformed, expired or not trusted
            RuntimeError: If the key set cannot be fetched
        """
        header = jwt.get_unverified_header(token)
        alg = header.get("alg")

        if alg == "HS256":
            if not self.jwt_secret:
                raise jwt.InvalidTokenError("HS256 token received but AUTH_JWT_SECRET is not configured")
            key: Union[str, bytes] = self.jwt_secret
        elif alg in ASYMMETRIC_ALGORITHMS:
            key = await self._public_key_for(header.get("kid"))
        else:
            raise jwt.InvalidTokenError(f"Unsupported algorithm: {alg}")

        payload = self._decode(token, key, [alg])
        try:
            claims = JWTClaims(**payload)
        except PydanticValidationError as e:
            raise jwt.InvalidTokenError(f"Token claims are malformed: {e.error_count()} error(s)") from e

        LOGGER.debug(f"Successfully verified token for user: {claims.sub}")
        return claims

    async def _public_key_for(self, kid: Optional[str]) -> str:
        if not kid:
            raise jwt.InvalidTokenError("JWT header missing 'kid' (key ID)")
        if self.jwks_service is None:
            raise jwt.InvalidTokenError("Asymmetric token received but no JWKS URL is configured")

        jwk_key = await self.jwks_service.get_key(kid)
        if jwk_key is None:
            raise jwt.InvalidTokenError(f"No matching key found for kid: {kid}")

        try:
            return jwk_to_pem(jwk_key)
        except ValueError as e:
            raise jwt.InvalidTokenError(str(e)) from e

    def _decode(self, token: str, key: Union[str, bytes], algorithms: List[str]) -> Dict[str, Any]:
        required = ["sub", "exp"]
        if self.issuer:
            required.append("iss")

        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=self.audience or None,
            issuer=self.issuer or None,
            options={
                "verify_exp": True,
                "verify_iss": bool(self.issuer),
                "verify_aud": bool(self.audience),
                "require": required,
            },
        )
