import logging
from pathlib import Path
from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

from residency_vote.models.address_model import AccountAddress

logger = logging.getLogger(__name__)

COUNTRY_CODE_SIZE = 2


# Bytes signed by the verifier and re-derived by the contract:
# the 32 address bytes followed by the two country code bytes, no separator.
def canonical_message(address: AccountAddress, country_code: str) -> bytes:
    code = country_code.encode("utf-8")
    if len(code) != COUNTRY_CODE_SIZE:
        raise ValueError(f"country code must be {COUNTRY_CODE_SIZE} bytes, got {len(code)}")
    return address.raw + code


def sign_attestation(signing_key: Ed25519PrivateKey, address: AccountAddress, country_code: str) -> bytes:
    """Sign (address, country_code). Ed25519 signatures are deterministic, so equal inputs give equal output."""
    return signing_key.sign(canonical_message(address, country_code))


def verify_attestation(
    public_key: Ed25519PublicKey, address: AccountAddress, country_code: str, signature: bytes
) -> bool:
    try:
        message = canonical_message(address, country_code)
    except ValueError:
        return False
    try:
        public_key.verify(signature, message)
    except InvalidSignature:
        return False
    return True


def public_key_bytes(public_key: Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw)


def private_key_bytes(signing_key: Ed25519PrivateKey) -> bytes:
    return signing_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


# --- Key files ---
# Both keys are stored as raw binary: 32 bytes each.

def load_public_key(path: Path) -> Ed25519PublicKey:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise RuntimeError(f"Could not read public key file {path}: {e}")
    try:
        return Ed25519PublicKey.from_public_bytes(data)
    except ValueError as e:
        raise RuntimeError(f"Could not deserialize public key: {e}")


def load_signing_key(secret_path: Path, public_path: Path) -> Ed25519PrivateKey:
    """
    Load the verifier key pair from disk.
    Fails if the stored public key does not belong to the secret key.
    """
    try:
        data = Path(secret_path).read_bytes()
    except OSError as e:
        raise RuntimeError(f"Could not read secret key file {secret_path}: {e}")
    try:
        signing_key = Ed25519PrivateKey.from_private_bytes(data)
    except ValueError as e:
        raise RuntimeError(f"Could not deserialize secret key: {e}")

    public_key = load_public_key(public_path)
    if public_key_bytes(public_key) != public_key_bytes(signing_key.public_key()):
        raise RuntimeError("Public key does not match the secret key")
    logger.info(f"Loaded verifier key {public_key_bytes(public_key).hex()}")
    return signing_key


def generate_keypair(directory: Path) -> Tuple[Path, Path]:
    """Write a fresh key pair as secret_key.bin and public_key.bin into `directory`."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    signing_key = Ed25519PrivateKey.generate()
    secret_path = directory / "secret_key.bin"
    public_path = directory / "public_key.bin"
    secret_path.write_bytes(private_key_bytes(signing_key))
    secret_path.chmod(0o600)
    public_path.write_bytes(public_key_bytes(signing_key.public_key()))
    logger.info(f"Wrote key pair to {directory}")
    return secret_path, public_path
