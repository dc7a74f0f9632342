"""Tests for JWT signing and verification."""

import time

import jwt
import pytest

from msauth.crypto.jwt_manager import JWTManager
from msauth.crypto.keys import generate_signing_key
from msauth.crypto.types import SigningKey

ISSUER = "http://localhost:8000"


@pytest.fixture
def jwt_mgr() -> JWTManager:
    return JWTManager()


@pytest.fixture
def key() -> SigningKey:
    return generate_signing_key("EC", "P-256")


def _claims(ttl: int = 60) -> dict:
    return {"iss": ISSUER, "aud": "svc", "exp": int(time.time()) + ttl, "a": 1}


class TestSign:
    """Tests for token signing."""

    def test_token_has_kid_header(self, jwt_mgr: JWTManager, key: SigningKey) -> None:
        token = jwt_mgr.sign(_claims(), key)
        header = jwt.get_unverified_header(token)
        assert header["kid"] == key.kid
        assert header["alg"] == "ES256"

    def test_extra_headers_kept(self, jwt_mgr: JWTManager, key: SigningKey) -> None:
        token = jwt_mgr.sign(_claims(), key, headers={"typ": "access+jwt"})
        assert jwt.get_unverified_header(token)["typ"] == "access+jwt"

    def test_public_key_cannot_sign(
        self, jwt_mgr: JWTManager, key: SigningKey
    ) -> None:
        with pytest.raises(ValueError):
            jwt_mgr.sign(_claims(), key.model_copy(update={"private_key_pem": None}))


class TestVerify:
    """Tests for token verification."""

    def test_valid_token(self, jwt_mgr: JWTManager, key: SigningKey) -> None:
        token = jwt_mgr.sign(_claims(), key)
        claims = jwt_mgr.verify(
            token, key, algorithms=["ES256"], audience="svc", issuer=ISSUER
        )
        assert claims["a"] == 1

    def test_expired_token_rejected(
        self, jwt_mgr: JWTManager, key: SigningKey
    ) -> None:
        token = jwt_mgr.sign(_claims(ttl=-10), key)
        with pytest.raises(jwt.ExpiredSignatureError):
            jwt_mgr.verify(token, key, algorithms=["ES256"])

    def test_missing_exp_rejected(self, jwt_mgr: JWTManager, key: SigningKey) -> None:
        token = jwt_mgr.sign({"a": 1}, key)
        with pytest.raises(jwt.MissingRequiredClaimError):
            jwt_mgr.verify(token, key, algorithms=["ES256"])

    def test_wrong_key_rejected(self, jwt_mgr: JWTManager, key: SigningKey) -> None:
        token = jwt_mgr.sign(_claims(), key)
        other = generate_signing_key("EC", "P-256")
        with pytest.raises(jwt.InvalidSignatureError):
            jwt_mgr.verify(token, other, algorithms=["ES256"])

    def test_wrong_issuer_rejected(
        self, jwt_mgr: JWTManager, key: SigningKey
    ) -> None:
        token = jwt_mgr.sign(_claims(), key)
        with pytest.raises(jwt.InvalidIssuerError):
            jwt_mgr.verify(token, key, algorithms=["ES256"], issuer="http://other")

    def test_wrong_audience_rejected(
        self, jwt_mgr: JWTManager, key: SigningKey
    ) -> None:
        token = jwt_mgr.sign(_claims(), key)
        with pytest.raises(jwt.InvalidAudienceError):
            jwt_mgr.verify(token, key, algorithms=["ES256"], audience="other")

    def test_algorithm_outside_allow_list_rejected(
        self, jwt_mgr: JWTManager, key: SigningKey
    ) -> None:
        token = jwt_mgr.sign(_claims(), key)
        with pytest.raises(jwt.InvalidAlgorithmError):
            jwt_mgr.verify(token, key, algorithms=["RS256"])

    def test_subject_mismatch_rejected(
        self, jwt_mgr: JWTManager, key: SigningKey
    ) -> None:
        token = jwt_mgr.sign({**_claims(), "sub": "svc-a"}, key)
        with pytest.raises(jwt.InvalidTokenError):
            jwt_mgr.verify(token, key, algorithms=["ES256"], subject="svc-b")


class TestDecodeUnverified:
    """Tests for decoding without verification."""

    def test_decodes_expired_token(
        self, jwt_mgr: JWTManager, key: SigningKey
    ) -> None:
        token = jwt_mgr.sign(_claims(ttl=-10), key)
        decoded = jwt_mgr.decode_unverified(token)
        assert decoded.header["kid"] == key.kid
        assert decoded.payload["a"] == 1
