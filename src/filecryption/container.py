# -*- coding: utf-8 -*-
"""
Password-protected file container: framing and encode/decode orchestration.

Container layout (all offsets fixed):

    salt[16] || nonce[12] || flag[1] || ciphertext||tag[...]

The ciphertext is AES-256-GCM over the (optionally gzip-compressed) payload:

    metadata_len[4, little-endian uint32] || metadata JSON {"name","type"} || file bytes

The key is PBKDF2-HMAC-SHA256(password, salt, 100_000). Salt and nonce are
fresh per encode and travel in clear. The flag byte is the only source of
truth for decompression on decode.

Decode fails closed:
    - fewer than 29 bytes                      -> FormatError (before any crypto)
    - tag mismatch (wrong password or tamper)  -> AuthenticationError
    - flagged body does not inflate            -> IntegrityError
    - metadata length points past the body     -> FormatError

A metadata frame that does not parse (or a body too short to carry one) is
accepted for compatibility with containers written without metadata: the
whole body is returned under a name synthesized from the container's own
file name.

Example:
    >>> blob = encode(b"HELLOWORLD", "hello.txt", "text/plain", "correcthorse")
    >>> decode(blob, "correcthorse").name
    'hello.txt'
"""

from __future__ import annotations

import json
import logging
import struct
from dataclasses import dataclass
from typing import Any, Dict, Final, Iterator, Optional, Union

from filecryption.compression import GzipCompressor
from filecryption.config import CodecConfig
from filecryption.exceptions import FormatError, InputValidationError
from filecryption.kdf import KEY_LEN, SALT_LEN, DefaultKdfProvider, make_pbkdf2_params
from filecryption.protocols import (
    AeadCipherProtocol,
    CompressorProtocol,
    KdfProtocol,
    Password,
)
from filecryption.symmetric import NONCE_LEN, SymmetricCipher, generate_nonce
from filecryption.utils import generate_random_bytes

_LOGGER: Final = logging.getLogger(__name__)

FLAG_LEN: Final[int] = 1
HEADER_LEN: Final[int] = SALT_LEN + NONCE_LEN + FLAG_LEN
METADATA_LEN_PREFIX: Final = struct.Struct("<I")

_MAX_METADATA_LEN: Final[int] = 0xFFFFFFFF

ContainerBytes = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class ContainerHeader:
    """Clear-text fields of a container plus the opaque ciphertext."""

    salt: bytes
    nonce: bytes
    flag: int
    ciphertext: bytes


@dataclass(frozen=True)
class DecodedFile:
    """
    Result of a successful decode.

    Unpacks as the (data, name, mime_type) triple:

        >>> data, name, mime_type = DecodedFile(b"x", "a.txt", "text/plain")

    Attributes:
        data: original file bytes.
        name: original file name, or a synthesized one.
        mime_type: original media type, or the configured default.
        metadata_recovered: False when the metadata frame could not be parsed.
    """

    data: bytes
    name: str
    mime_type: str
    metadata_recovered: bool = True

    def __iter__(self) -> Iterator[Any]:
        return iter((self.data, self.name, self.mime_type))


def build_metadata(file_name: str, mime_type: str) -> bytes:
    """
    Compact UTF-8 JSON, byte-compatible with JSON.stringify({name, type}).

    Lone surrogates (undecodable bytes in a file system name) are written as
    \\uXXXX escapes, which json.loads turns back into the same str.
    """
    return json.dumps(
        {"name": file_name, "type": mime_type},
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8", "backslashreplace")


def build_payload(file_bytes: bytes, file_name: str, mime_type: str) -> bytes:
    """Length-prefixed metadata followed by the raw file bytes."""
    metadata = build_metadata(file_name, mime_type)
    if len(metadata) > _MAX_METADATA_LEN:
        raise InputValidationError("File metadata is too large")
    return METADATA_LEN_PREFIX.pack(len(metadata)) + metadata + bytes(file_bytes)


def parse_header(container: ContainerBytes) -> ContainerHeader:
    """
    Split a container into its header fields and ciphertext.

    Raises:
        FormatError: if the container is shorter than the fixed header.
    """
    data = bytes(container)
    if len(data) < HEADER_LEN:
        raise FormatError("Container is too short")
    return ContainerHeader(
        salt=data[:SALT_LEN],
        nonce=data[SALT_LEN : SALT_LEN + NONCE_LEN],
        flag=data[SALT_LEN + NONCE_LEN],
        ciphertext=data[HEADER_LEN:],
    )


def container_filename(
    file_name: str, hide_name: bool = False, config: Optional[CodecConfig] = None
) -> str:
    """
    Name to store a container under: "<name>.enc", or a fixed neutral name
    when the original name should not be visible on disk.
    """
    cfg = config or CodecConfig()
    if hide_name or not file_name:
        return cfg.hidden_container_name
    return f"{file_name}{cfg.container_suffix}"


def fallback_filename(
    container_name: Optional[str], config: Optional[CodecConfig] = None
) -> str:
    """
    Synthesize a file name for a container whose metadata is unusable:
    the container's own name with its suffix stripped, behind a prefix.

        >>> fallback_filename("report.pdf.enc")
        'decrypted_report.pdf'
    """
    cfg = config or CodecConfig()
    if not container_name:
        return cfg.fallback_name
    base = container_name
    if base.endswith(cfg.container_suffix):
        base = base[: -len(cfg.container_suffix)]
    if not base:
        return cfg.fallback_name
    return f"{cfg.fallback_prefix}{base}"


def _parse_metadata(raw: bytes) -> Optional[Dict[str, Any]]:
    try:
        meta = json.loads(raw.decode("utf-8"))
    except (ValueError, RecursionError):
        # UnicodeDecodeError and JSONDecodeError are both ValueError; deep nesting recurses
        return None
    if not isinstance(meta, dict):
        return None
    return meta


class ContainerCodec:
    """
    Encode files into password-protected containers and back.

    Collaborators are injected through Protocols; defaults are PBKDF2-SHA256,
    AES-256-GCM and gzip. Instances hold no per-call state and may be shared
    between threads.

    Examples:
        >>> codec = ContainerCodec()
        >>> blob = codec.encode(b"data", "a.bin", "application/octet-stream", "pw")
        >>> codec.decode(blob, "pw").data
        b'data'
    """

    __slots__ = ("_kdf", "_cipher", "_compressor", "_config")

    def __init__(
        self,
        *,
        kdf: Optional[KdfProtocol] = None,
        cipher: Optional[AeadCipherProtocol] = None,
        compressor: Optional[CompressorProtocol] = None,
        config: Optional[CodecConfig] = None,
    ) -> None:
        self._kdf: KdfProtocol = kdf or DefaultKdfProvider()
        self._cipher: AeadCipherProtocol = cipher or SymmetricCipher()
        self._compressor: CompressorProtocol = compressor or GzipCompressor()
        self._config = config or CodecConfig()

    @property
    def config(self) -> CodecConfig:
        return self._config

    def _check_password(self, password: Password) -> None:
        if not isinstance(password, (str, bytes, bytearray)):
            raise InputValidationError("Password must be str, bytes or bytearray")
        if not password and not self._config.allow_empty_password:
            raise InputValidationError("Password must not be empty")
        if isinstance(password, str):
            try:
                password.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise InputValidationError("Password must be valid Unicode text") from exc

    def _derive(self, password: Password, salt: bytes) -> bytes:
        return self._kdf.derive_key(password, salt, KEY_LEN, params=make_pbkdf2_params())

    def encode(
        self,
        file_bytes: Union[bytes, bytearray, memoryview],
        file_name: str,
        mime_type: str,
        password: Password,
        compress: Optional[bool] = None,
    ) -> bytes:
        """
        Produce a container for one file.

        Args:
            file_bytes: raw file content.
            file_name: original file name, stored encrypted.
            mime_type: original media type, stored encrypted ("" allowed).
            password: non-empty password.
            compress: request gzip; None uses the configured default. If gzip
                is unavailable the container is written uncompressed.

        Returns:
            Container bytes.

        Raises:
            InputValidationError: on bad argument types or an empty password.
        """
        if not isinstance(file_bytes, (bytes, bytearray, memoryview)):
            raise InputValidationError("File content must be bytes")
        if not isinstance(file_name, str) or not isinstance(mime_type, str):
            raise InputValidationError("File name and media type must be str")
        self._check_password(password)
        if compress is None:
            compress = self._config.compress_default

        payload = build_payload(bytes(file_bytes), file_name, mime_type)
        body, flag = self._compressor.compress(payload, bool(compress))

        salt = generate_random_bytes(SALT_LEN)
        nonce = generate_nonce()
        key = self._derive(password, salt)
        ciphertext = self._cipher.encrypt(key, nonce, body)

        _LOGGER.debug(
            "Encoded container: file=%d bytes, body=%d bytes, flag=%d",
            len(file_bytes),
            len(body),
            flag,
        )
        return salt + nonce + bytes((flag,)) + ciphertext

    def decode(
        self,
        container: ContainerBytes,
        password: Password,
        container_name: Optional[str] = None,
    ) -> DecodedFile:
        """
        Recover the original file from a container.

        Args:
            container: container bytes.
            password: the password used on encode.
            container_name: the container's own file name, used only to name
                the output when the metadata frame is unusable.

        Returns:
            DecodedFile.

        Raises:
            FormatError: container too short (checked first), or metadata
                length out of range.
            InputValidationError: on bad argument types or an empty password.
            AuthenticationError: wrong password or corrupted/tampered container.
            IntegrityError: compressed body failed to decompress.
        """
        if not isinstance(container, (bytes, bytearray, memoryview)):
            raise InputValidationError("Container must be bytes")
        header = parse_header(container)
        self._check_password(password)
        key = self._derive(password, header.salt)
        body = self._cipher.decrypt(key, header.nonce, header.ciphertext)
        body = self._compressor.decompress(body, header.flag)

        if len(body) < METADATA_LEN_PREFIX.size:
            return self._fallback(body, container_name)

        (meta_len,) = METADATA_LEN_PREFIX.unpack_from(body, 0)
        if meta_len > len(body) - METADATA_LEN_PREFIX.size:
            raise FormatError("Metadata length exceeds payload")

        start = METADATA_LEN_PREFIX.size
        meta = _parse_metadata(body[start : start + meta_len])
        if meta is None:
            return self._fallback(body, container_name)

        name = meta.get("name")
        mime_type = meta.get("type")
        data = body[start + meta_len :]
        _LOGGER.debug(
            "Decoded container: file=%d bytes, flag=%d", len(data), header.flag
        )
        return DecodedFile(
            data=data,
            name=name if isinstance(name, str) and name else self._config.fallback_name,
            mime_type=(
                mime_type
                if isinstance(mime_type, str) and mime_type
                else self._config.default_mime_type
            ),
        )

    def _fallback(self, body: bytes, container_name: Optional[str]) -> DecodedFile:
        _LOGGER.warning("Container metadata could not be parsed; returning raw content")
        return DecodedFile(
            data=body,
            name=fallback_filename(container_name, self._config),
            mime_type=self._config.default_mime_type,
            metadata_recovered=False,
        )


_DEFAULT_CODEC: Final = ContainerCodec()


def encode(
    file_bytes: Union[bytes, bytearray, memoryview],
    file_name: str,
    mime_type: str,
    password: Password,
    compress: bool = False,
) -> bytes:
    """Encode with the default codec. See ContainerCodec.encode."""
    return _DEFAULT_CODEC.encode(file_bytes, file_name, mime_type, password, compress)


def decode(
    container: ContainerBytes,
    password: Password,
    container_name: Optional[str] = None,
) -> DecodedFile:
    """Decode with the default codec. See ContainerCodec.decode."""
    return _DEFAULT_CODEC.decode(container, password, container_name)


__all__ = [
    "HEADER_LEN",
    "METADATA_LEN_PREFIX",
    "ContainerHeader",
    "DecodedFile",
    "ContainerCodec",
    "build_metadata",
    "build_payload",
    "parse_header",
    "container_filename",
    "fallback_filename",
    "encode",
    "decode",
]
