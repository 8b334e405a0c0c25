from __future__ import annotations

import concurrent.futures
import os

import pytest

from filecryption.exceptions import (
    AUTHENTICATION_FAILED_MESSAGE,
    AuthenticationError,
    DecryptionError,
    EncryptionError,
)
from filecryption.symmetric import (
    KEY_LEN,
    NONCE_LEN,
    TAG_LEN,
    SymmetricCipher,
    generate_nonce,
)

_CIPHER = SymmetricCipher()


def test_roundtrip_and_tag_length() -> None:
    key = os.urandom(KEY_LEN)
    nonce = generate_nonce()
    combined = _CIPHER.encrypt(key, nonce, b"hello")
    assert len(combined) == len(b"hello") + TAG_LEN
    assert _CIPHER.decrypt(key, nonce, combined) == b"hello"


def test_empty_plaintext_roundtrip() -> None:
    key = os.urandom(KEY_LEN)
    nonce = generate_nonce()
    combined = _CIPHER.encrypt(key, nonce, b"")
    assert len(combined) == TAG_LEN
    assert _CIPHER.decrypt(key, nonce, combined) == b""


def test_known_answer_gcm_test_case_14() -> None:
    # AES-256-GCM, zero key, zero IV, 16 zero bytes (McGrew-Viega GCM test case 14)
    key = bytes(32)
    nonce = bytes(12)
    combined = _CIPHER.encrypt(key, nonce, bytes(16))
    assert combined.hex() == (
        "cea7403d4d606b6e074ec5d3baf39d18" "d0d1c8a799996bf0265b98b5d48ab919"
    )


def test_wrong_key_and_tamper_give_same_error() -> None:
    key = os.urandom(KEY_LEN)
    nonce = generate_nonce()
    combined = _CIPHER.encrypt(key, nonce, b"secret")
    tampered = combined[:-1] + bytes([combined[-1] ^ 0xFF])

    with pytest.raises(AuthenticationError) as wrong_key:
        _CIPHER.decrypt(os.urandom(KEY_LEN), nonce, combined)
    with pytest.raises(AuthenticationError) as bad_tag:
        _CIPHER.decrypt(key, nonce, tampered)
    assert str(wrong_key.value) == str(bad_tag.value) == AUTHENTICATION_FAILED_MESSAGE


def test_data_shorter_than_tag_is_authentication_error() -> None:
    with pytest.raises(AuthenticationError):
        _CIPHER.decrypt(os.urandom(KEY_LEN), generate_nonce(), b"x" * (TAG_LEN - 1))


def test_authentication_error_is_decryption_error() -> None:
    assert issubclass(AuthenticationError, DecryptionError)


def test_invalid_key_or_nonce_sizes() -> None:
    cipher = SymmetricCipher()
    with pytest.raises(EncryptionError):
        cipher.encrypt(b"k" * 16, generate_nonce(), b"p")
    with pytest.raises(EncryptionError):
        cipher.encrypt(os.urandom(KEY_LEN), b"n" * 8, b"p")
    with pytest.raises(DecryptionError):
        cipher.decrypt(b"k" * 16, generate_nonce(), b"x" * 32)
    with pytest.raises(DecryptionError):
        cipher.decrypt(os.urandom(KEY_LEN), b"n" * 8, b"x" * 32)


def test_bytearray_plaintext_is_wiped() -> None:
    key = os.urandom(KEY_LEN)
    nonce = generate_nonce()
    pt = bytearray(b"wipe me")
    combined = _CIPHER.encrypt(key, nonce, pt)
    assert pt == bytearray(7)
    assert _CIPHER.decrypt(key, nonce, combined) == b"wipe me"


def test_encrypt_internal_failure_is_wrapped(monkeypatch: pytest.MonkeyPatch) -> None:
    class Boom(Exception):
        pass

    def fail(*args: object, **kwargs: object) -> None:
        raise Boom()

    monkeypatch.setattr("filecryption.symmetric.Cipher", fail)
    with pytest.raises(EncryptionError):
        SymmetricCipher().encrypt(os.urandom(KEY_LEN), generate_nonce(), b"data")


def test_nonce_uniqueness_parallel() -> None:
    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as ex:
        nonces = list(ex.map(lambda _i: generate_nonce(), range(500)))
    assert len(set(nonces)) == 500
    assert all(len(n) == NONCE_LEN for n in nonces)
