"""Tests for bearer token verification."""

import base64
import time
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from meeting_summarizer.core.jwks import JWKKey, JWKSService
from meeting_summarizer.core.jwt import JWTVerifier, jwk_to_pem

ISSUER = "https://auth.example.com"
SECRET = "unit-test-secret-with-enough-length-for-hs256"


def _b64(value: int) -> str:
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _claims(**overrides):
    now = int(time.time())
    claims = {"sub": "user-42", "iss": ISSUER, "iat": now, "exp": now + 300, "email": "u@example.com"}
    claims.update(overrides)
    return claims


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def rsa_jwk(rsa_key) -> JWKKey:
    numbers = rsa_key.public_key().public_numbers()
    return JWKKey(kid="key-1", kty="RSA", alg="RS256", n=_b64(numbers.n), e=_b64(numbers.e))


class TestHS256:
    @pytest.mark.asyncio
    async def test_valid_token(self):
        verifier = JWTVerifier(issuer=ISSUER, jwt_secret=SECRET)
        token = jwt.encode(_claims(), SECRET, algorithm="HS256")

        claims = await verifier.verify_token(token)

        assert claims.sub == "user-42"
        assert claims.email == "u@example.com"

    @pytest.mark.asyncio
    async def test_expired_token(self):
        verifier = JWTVerifier(issuer=ISSUER, jwt_secret=SECRET)
        token = jwt.encode(_claims(exp=int(time.time()) - 60), SECRET, algorithm="HS256")

        with pytest.raises(jwt.ExpiredSignatureError):
            await verifier.verify_token(token)

    @pytest.mark.asyncio
    async def test_wrong_issuer(self):
        verifier = JWTVerifier(issuer=ISSUER, jwt_secret=SECRET)
        token = jwt.encode(_claims(iss="https://evil.example.com"), SECRET, algorithm="HS256")

        with pytest.raises(jwt.InvalidIssuerError):
            await verifier.verify_token(token)

    @pytest.mark.asyncio
    async def test_wrong_secret(self):
        verifier = JWTVerifier(issuer=ISSUER, jwt_secret=SECRET)
        token = jwt.encode(_claims(), "another-secret-with-enough-length-for-hs256", algorithm="HS256")

        with pytest.raises(jwt.InvalidSignatureError):
            await verifier.verify_token(token)

    @pytest.mark.asyncio
    async def test_audience_checked_when_configured(self):
        verifier = JWTVerifier(issuer=ISSUER, jwt_secret=SECRET, audience="meeting-notes")

        good = jwt.encode(_claims(aud="meeting-notes"), SECRET, algorithm="HS256")
        bad = jwt.encode(_claims(aud="other-app"), SECRET, algorithm="HS256")

        assert (await verifier.verify_token(good)).sub == "user-42"
        with pytest.raises(jwt.InvalidAudienceError):
            await verifier.verify_token(bad)

    @pytest.mark.asyncio
    async def test_secret_not_configured(self):
        token = jwt.encode(_claims(), SECRET, algorithm="HS256")

        with pytest.raises(jwt.InvalidTokenError):
            await JWTVerifier(issuer=ISSUER).verify_token(token)

    @pytest.mark.asyncio
    async def test_signed_token_with_malformed_claims(self):
        verifier = JWTVerifier(issuer=ISSUER, jwt_secret=SECRET)
        token = jwt.encode(_claims(exp=int(time.time()) + 300.5), SECRET, algorithm="HS256")

        with pytest.raises(jwt.InvalidTokenError, match="claims are malformed"):
            await verifier.verify_token(token)


class TestAsymmetric:
    @pytest.mark.asyncio
    async def test_rs256_token_verified_with_jwks(self, rsa_key, rsa_jwk):
        jwks_service = MagicMock(spec=JWKSService)
        jwks_service.get_key = AsyncMock(return_value=rsa_jwk)
        verifier = JWTVerifier(issuer=ISSUER, jwks_service=jwks_service)
        token = jwt.encode(_claims(), rsa_key, algorithm="RS256", headers={"kid": "key-1"})

        claims = await verifier.verify_token(token)

        assert claims.sub == "user-42"
        jwks_service.get_key.assert_awaited_once_with("key-1")

    @pytest.mark.asyncio
    async def test_unknown_kid(self, rsa_key):
        jwks_service = MagicMock(spec=JWKSService)
        jwks_service.get_key = AsyncMock(return_value=None)
        verifier = JWTVerifier(issuer=ISSUER, jwks_service=jwks_service)
        token = jwt.encode(_claims(), rsa_key, algorithm="RS256", headers={"kid": "rotated"})

        with pytest.raises(jwt.InvalidTokenError, match="No matching key"):
            await verifier.verify_token(token)

    @pytest.mark.asyncio
    async def test_unsupported_algorithm(self):
        token = jwt.encode(_claims(), SECRET, algorithm="HS512")

        with pytest.raises(jwt.InvalidTokenError, match="Unsupported algorithm"):
            await JWTVerifier(issuer=ISSUER, jwt_secret=SECRET).verify_token(token)

    def test_ec_jwk_to_pem(self):
        private_key = ec.generate_private_key(ec.SECP256R1())
        numbers = private_key.public_key().public_numbers()
        jwk_key = JWKKey(kid="ec-1", kty="EC", crv="P-256", x=_b64(numbers.x), y=_b64(numbers.y))

        pem = jwk_to_pem(jwk_key)

        expected = private_key.public_key().public_bytes(
            serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
        )
        assert pem == expected.decode("utf-8")

    def test_unsupported_key_type(self):
        with pytest.raises(ValueError):
            jwk_to_pem(JWKKey(kid="k", kty="oct"))


class TestJWKSService:
    @pytest.mark.asyncio
    async def test_keys_are_cached_within_ttl(self, rsa_jwk):
        service = JWKSService("https://auth.example.com/.well-known/jwks.json", cache_ttl=60)
        service._fetch_keys = AsyncMock(return_value={"key-1": rsa_jwk})

        assert await service.get_key("key-1") == rsa_jwk
        assert await service.get_key("missing") is None
        assert service._fetch_keys.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_cache_refetches(self, rsa_jwk):
        service = JWKSService("https://auth.example.com/.well-known/jwks.json", cache_ttl=0)
        service._fetch_keys = AsyncMock(return_value={"key-1": rsa_jwk})

        await service.get_keys()
        await service.get_keys()

        assert service._fetch_keys.await_count == 2
