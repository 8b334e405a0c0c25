# -*- coding: utf-8 -*-
"""
Encrypt and decrypt flows as explicit finite-state machines.

Each flow object owns its own state (selected input, password, options,
result); nothing is global. Statuses:

    IDLE --(inputs complete)--> READY --run()--> PROCESSING --> SUCCESS
                                  ^                          \\-> ERROR
                                  \\---- new input / retry ----/

Selecting a new input from SUCCESS or ERROR discards the previous result.
run() is only accepted from READY or ERROR (retry) with complete inputs;
anything else raises InvalidTransitionError. The password is dropped after a
successful run.

Example:
    >>> flow = EncryptFlow()
    >>> flow.select_file(SourceFile(b"hi", "hi.txt", "text/plain"))
    >>> flow.set_password("pw", "pw")
    >>> container, download_name = flow.run()
    >>> download_name
    'hi.txt.enc'
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional, Tuple

from filecryption.container import ContainerCodec, DecodedFile, container_filename
from filecryption.exceptions import CryptoError, InputValidationError
from filecryption.files import SourceFile
from filecryption.protocols import Password

_LOGGER: Final = logging.getLogger(__name__)

PASSWORD_MISMATCH_MESSAGE: Final[str] = "Passwords do not match."


class ProcessStatus(str, Enum):
    IDLE = "idle"
    READY = "ready"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FlowState:
    status: ProcessStatus
    message: Optional[str] = None


class InvalidTransitionError(RuntimeError):
    """Raised when an action is not allowed in the flow's current status."""


class _Flow(ABC):
    _RUNNABLE: Final = frozenset({ProcessStatus.READY, ProcessStatus.ERROR})

    def __init__(self, codec: Optional[ContainerCodec] = None) -> None:
        self._codec = codec or ContainerCodec()
        self._lock = threading.RLock()
        self._state = FlowState(ProcessStatus.IDLE)
        self._password: Optional[Password] = None

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def status(self) -> ProcessStatus:
        return self._state.status

    @abstractmethod
    def _inputs_complete(self) -> bool:
        """True when run() has everything it needs."""

    @abstractmethod
    def _clear_result(self) -> None:
        """Drop the result of a previous run."""

    def _set(self, status: ProcessStatus, message: Optional[str] = None) -> None:
        _LOGGER.debug(
            "%s: %s -> %s", type(self).__name__, self._state.status.value, status.value
        )
        self._state = FlowState(status, message)

    def _ensure_not_processing(self) -> None:
        if self._state.status is ProcessStatus.PROCESSING:
            raise InvalidTransitionError("Operation in progress")

    def _input_changed(self) -> None:
        """Recompute IDLE/READY after any input changes."""
        self._clear_result()
        self._set(ProcessStatus.READY if self._inputs_complete() else ProcessStatus.IDLE)

    def _begin(self) -> None:
        self._ensure_not_processing()
        if self._state.status not in self._RUNNABLE or not self._inputs_complete():
            raise InvalidTransitionError(
                f"Cannot run from status {self._state.status.value!r}"
            )

    def _fail(self, exc: CryptoError) -> None:
        self._set(ProcessStatus.ERROR, str(exc))

    def reset(self) -> None:
        with self._lock:
            self._ensure_not_processing()
            self._password = None
            self._reset_inputs()
            self._clear_result()
            self._set(ProcessStatus.IDLE)

    @abstractmethod
    def _reset_inputs(self) -> None:
        """Forget every selected input and option."""


class EncryptFlow(_Flow):
    """Select file -> password + confirmation -> options -> container."""

    def __init__(self, codec: Optional[ContainerCodec] = None) -> None:
        super().__init__(codec)
        self._source: Optional[SourceFile] = None
        self._confirm: Optional[Password] = None
        self._compress: Optional[bool] = None
        self._hide_name = False
        self._result: Optional[Tuple[bytes, str]] = None

    @property
    def result(self) -> Optional[Tuple[bytes, str]]:
        """(container, download name) after SUCCESS."""
        return self._result

    def _inputs_complete(self) -> bool:
        return self._source is not None and bool(self._password)

    def _clear_result(self) -> None:
        self._result = None

    def _reset_inputs(self) -> None:
        self._source = None
        self._confirm = None
        self._compress = None
        self._hide_name = False

    def select_file(self, source: SourceFile) -> None:
        with self._lock:
            self._ensure_not_processing()
            self._source = source
            self._input_changed()

    def set_password(self, password: Password, confirm: Password) -> None:
        with self._lock:
            self._ensure_not_processing()
            self._password = password
            self._confirm = confirm
            self._input_changed()

    def set_options(self, *, compress: Optional[bool] = None, hide_name: bool = False) -> None:
        with self._lock:
            self._ensure_not_processing()
            self._compress = compress
            self._hide_name = hide_name
            self._input_changed()

    def run(self) -> Tuple[bytes, str]:
        """
        Encrypt the selected file.

        Raises:
            InvalidTransitionError: inputs incomplete or flow busy/finished.
            InputValidationError: password and confirmation differ.
            CryptoError: any codec failure (flow moves to ERROR).
        """
        with self._lock:
            self._begin()
            assert self._source is not None and self._password is not None
            if self._password != self._confirm:
                err = InputValidationError(PASSWORD_MISMATCH_MESSAGE)
                self._fail(err)
                raise err
            self._set(ProcessStatus.PROCESSING, "Encrypting...")
            try:
                container = self._codec.encode(
                    self._source.data,
                    self._source.name,
                    self._source.mime_type,
                    self._password,
                    self._compress,
                )
            except CryptoError as exc:
                self._fail(exc)
                raise
            name = container_filename(self._source.name, self._hide_name, self._codec.config)
            self._result = (container, name)
            self._password = None
            self._confirm = None
            self._set(ProcessStatus.SUCCESS, "Encryption Complete")
            return self._result


class DecryptFlow(_Flow):
    """Select container -> password -> recovered file; retry on failure."""

    def __init__(self, codec: Optional[ContainerCodec] = None) -> None:
        super().__init__(codec)
        self._container: Optional[bytes] = None
        self._container_name: Optional[str] = None
        self._result: Optional[DecodedFile] = None

    @property
    def result(self) -> Optional[DecodedFile]:
        return self._result

    def _inputs_complete(self) -> bool:
        return self._container is not None and bool(self._password)

    def _clear_result(self) -> None:
        self._result = None

    def _reset_inputs(self) -> None:
        self._container = None
        self._container_name = None

    def select_container(self, data: bytes, name: Optional[str] = None) -> None:
        with self._lock:
            self._ensure_not_processing()
            self._container = bytes(data)
            self._container_name = name
            self._input_changed()

    def set_password(self, password: Password) -> None:
        with self._lock:
            self._ensure_not_processing()
            self._password = password
            self._input_changed()

    def run(self) -> DecodedFile:
        """
        Decrypt the selected container.

        Raises:
            InvalidTransitionError: inputs incomplete or flow busy/finished.
            CryptoError: FormatError, AuthenticationError, IntegrityError, ...
                (flow moves to ERROR; set a new password and run again).
        """
        with self._lock:
            self._begin()
            assert self._container is not None and self._password is not None
            self._set(ProcessStatus.PROCESSING, "Decrypting...")
            try:
                result = self._codec.decode(
                    self._container, self._password, self._container_name
                )
            except CryptoError as exc:
                self._fail(exc)
                raise
            self._result = result
            self._password = None
            self._set(ProcessStatus.SUCCESS, "Decryption Complete")
            return result


__all__ = [
    "PASSWORD_MISMATCH_MESSAGE",
    "ProcessStatus",
    "FlowState",
    "InvalidTransitionError",
    "EncryptFlow",
    "DecryptFlow",
]
