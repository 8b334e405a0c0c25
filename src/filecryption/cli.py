# -*- coding: utf-8 -*-
"""
Command-line interface.

Usage:
    filecryption encrypt report.pdf                # writes report.pdf.enc
    filecryption encrypt report.pdf --gzip --hide-name -o out/
    filecryption decrypt report.pdf.enc -o restored/
    echo "secret" | filecryption decrypt report.pdf.enc --password-stdin

Exit codes: 0 success, 1 decryption/format failure, 2 usage or input error.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Final, List, Optional

from filecryption import get_logger, setup_logging
from filecryption.config import load_config
from filecryption.exceptions import CryptoError, InputValidationError
from filecryption.service import ContainerService
from filecryption.workflow import PASSWORD_MISMATCH_MESSAGE

_LOGGER: Final = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class _PasswordError(Exception):
    pass


def _say(message: str, *, error: bool = False) -> None:
    # file system names may carry lone surrogates
    text = message.encode("utf-8", "backslashreplace").decode("utf-8")
    print(text, file=sys.stderr if error else sys.stdout)


def _read_password(from_stdin: bool, confirm: bool) -> str:
    if from_stdin:
        line = sys.stdin.readline()
        return line.rstrip("\r\n")
    password = getpass.getpass("Password: ")
    if confirm and getpass.getpass("Confirm password: ") != password:
        raise _PasswordError(PASSWORD_MISMATCH_MESSAGE)
    return password


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filecryption",
        description="Encrypt files into password-protected containers and back.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--config", default=None, help="path to a JSON config file")
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encrypt", help="encrypt a file")
    enc.add_argument("path", help="file to encrypt")
    enc.add_argument("-o", "--out-dir", default=None, help="output directory")
    enc.add_argument(
        "--gzip", dest="compress", action="store_true", default=None,
        help="compress before encrypting",
    )
    enc.add_argument(
        "--hide-name", action="store_true",
        help="store the container under a neutral file name",
    )
    enc.add_argument("--password-stdin", action="store_true", help="read password from stdin")

    dec = sub.add_parser("decrypt", help="decrypt a container")
    dec.add_argument("path", help="container to decrypt")
    dec.add_argument("-o", "--out-dir", default=None, help="output directory")
    dec.add_argument("--password-stdin", action="store_true", help="read password from stdin")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else None)
    config = load_config(None if args.config is None else Path(args.config))
    _LOGGER.debug("Running %s", args.command)

    try:
        password = _read_password(args.password_stdin, confirm=args.command == "encrypt")
    except _PasswordError as e:
        _say(f"[error] {e}", error=True)
        return EXIT_USAGE

    with ContainerService(config=config) as service:
        try:
            if args.command == "encrypt":
                out = service.encrypt_file(
                    args.path,
                    password,
                    out_dir=args.out_dir,
                    compress=args.compress,
                    hide_name=args.hide_name,
                )
                _say(f"[ok] Encrypted -> {out}")
            else:
                out, result = service.decrypt_file(args.path, password, out_dir=args.out_dir)
                if not result.metadata_recovered:
                    _say("[warn] Original name could not be recovered", error=True)
                _say(f"[ok] Decrypted -> {out} ({result.mime_type})")
        except (OSError, InputValidationError) as e:
            _say(f"[error] {e}", error=True)
            return EXIT_USAGE
        except CryptoError as e:
            _say(f"[error] {e}", error=True)
            return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
