import base64

import pytest

from core.errors import InternalError
from core.security import (
    decrypt_api_key,
    encrypt_api_key,
    hash_password,
    hash_refresh_token,
    verify_password,
)


def test_api_key_round_trip() -> None:
    secret = "sk-or-v1-abcdef"
    encrypted = encrypt_api_key(secret)

    assert secret not in encrypted
    assert decrypt_api_key(encrypted) == secret


def test_api_key_nonce_is_fresh_per_call() -> None:
    assert encrypt_api_key("same") != encrypt_api_key("same")


def test_tampered_ciphertext_is_rejected() -> None:
    raw = bytearray(base64.b64decode(encrypt_api_key("sk-or-v1-abcdef")))
    raw[-1] ^= 0x01

    with pytest.raises(InternalError):
        decrypt_api_key(base64.b64encode(bytes(raw)).decode("ascii"))


def test_wrong_secret_is_rejected() -> None:
    encrypted = encrypt_api_key("sk-or-v1-abcdef", secret="one")
    with pytest.raises(InternalError):
        decrypt_api_key(encrypted, secret="two")


@pytest.mark.parametrize("blob", ["not base64!!", base64.b64encode(b"short").decode("ascii")])
def test_malformed_blobs_are_rejected(blob: str) -> None:
    with pytest.raises(InternalError):
        decrypt_api_key(blob)


def test_password_hashing() -> None:
    stored = hash_password("correct horse")

    assert stored != "correct horse"
    assert verify_password("correct horse", stored)
    assert not verify_password("battery staple", stored)
    assert not verify_password("correct horse", None)
    assert not verify_password("correct horse", "not-a-hash")


def test_refresh_token_hash_is_sha256_hex() -> None:
    digest = hash_refresh_token("token")
    assert len(digest) == 64
    assert digest == hash_refresh_token("token")
