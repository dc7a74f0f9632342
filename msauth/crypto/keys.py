"""Signing key generation, encryption, and JWK conversion."""

import base64

import uuid_utils
from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from msauth.core.errors import ConfigError
from msauth.crypto.types import JWKEntry, SigningKey

RSA_MIN_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

EC_CURVES: dict[str, tuple[type[ec.EllipticCurve], str]] = {
    "P-256": (ec.SECP256R1, "ES256"),
    "P-384": (ec.SECP384R1, "ES384"),
    "P-521": (ec.SECP521R1, "ES512"),
}


def _private_pem(private_key: ec.EllipticCurvePrivateKey | rsa.RSAPrivateKey) -> str:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def _public_pem(private_key: ec.EllipticCurvePrivateKey | rsa.RSAPrivateKey) -> str:
    return (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


def jws_algorithm(algorithm: str, crv_or_size: str | int) -> str:
    """Map a key type and curve/size to its JWS algorithm name."""
    if algorithm == "EC":
        if crv_or_size not in EC_CURVES:
            raise ConfigError(f"unsupported EC curve {crv_or_size!r}")
        return EC_CURVES[str(crv_or_size)][1]
    if algorithm == "RSA":
        if not isinstance(crv_or_size, int) or crv_or_size < RSA_MIN_KEY_SIZE:
            raise ConfigError(f"RSA key size must be >= {RSA_MIN_KEY_SIZE} bits")
        return "RS256"
    raise ConfigError(f"unsupported key algorithm {algorithm!r}")


def generate_signing_key(algorithm: str, crv_or_size: str | int) -> SigningKey:
    """Generate a new EC or RSA keypair for JWT signing."""
    alg = jws_algorithm(algorithm, crv_or_size)
    private_key: ec.EllipticCurvePrivateKey | rsa.RSAPrivateKey
    if algorithm == "EC":
        curve_cls = EC_CURVES[str(crv_or_size)][0]
        private_key = ec.generate_private_key(curve_cls())
    else:
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT,
            key_size=int(crv_or_size),
        )
    return SigningKey(
        kid=str(uuid_utils.uuid7()),
        algorithm=algorithm,
        crv_or_size=crv_or_size,
        alg=alg,
        public_key_pem=_public_pem(private_key),
        private_key_pem=_private_pem(private_key),
    )


def encrypt_private_key(private_pem: str, fernet_key: str) -> str:
    """Encrypt a PEM private key with Fernet for database storage."""
    cipher = Fernet(fernet_key.encode())
    return cipher.encrypt(private_pem.encode()).decode()


def decrypt_private_key(encrypted: str, fernet_key: str) -> str:
    """Decrypt a Fernet-encrypted PEM private key."""
    cipher = Fernet(fernet_key.encode())
    return cipher.decrypt(encrypted.encode()).decode()


def _int_to_base64url(value: int, length: int | None = None) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = length or (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def signing_key_to_jwk(key: SigningKey) -> JWKEntry:
    """Convert the public half of a signing key to JWK format."""
    loaded = serialization.load_pem_public_key(key.public_key_pem.encode())
    if isinstance(loaded, RSAPublicKey):
        numbers = loaded.public_numbers()
        return JWKEntry(
            kty="RSA",
            alg=key.alg,
            kid=key.kid,
            n=_int_to_base64url(numbers.n),
            e=_int_to_base64url(numbers.e),
        )
    assert isinstance(loaded, EllipticCurvePublicKey)
    ec_numbers = loaded.public_numbers()
    coord_len = (loaded.curve.key_size + 7) // 8
    return JWKEntry(
        kty="EC",
        alg=key.alg,
        kid=key.kid,
        crv=str(key.crv_or_size),
        x=_int_to_base64url(ec_numbers.x, coord_len),
        y=_int_to_base64url(ec_numbers.y, coord_len),
    )
