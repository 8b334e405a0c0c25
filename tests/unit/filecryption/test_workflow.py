from __future__ import annotations

import pytest

from filecryption.exceptions import AuthenticationError, FormatError, InputValidationError
from filecryption.files import SourceFile
from filecryption.workflow import (
    PASSWORD_MISMATCH_MESSAGE,
    DecryptFlow,
    EncryptFlow,
    FlowState,
    InvalidTransitionError,
    ProcessStatus,
)

SOURCE = SourceFile(b"HELLOWORLD", "hello.txt", "text/plain")


def _encrypted(password: str = "pw") -> bytes:
    flow = EncryptFlow()
    flow.select_file(SOURCE)
    flow.set_password(password, password)
    container, _ = flow.run()
    return container


def test_encrypt_flow_happy_path() -> None:
    flow = EncryptFlow()
    assert flow.state == FlowState(ProcessStatus.IDLE)
    flow.select_file(SOURCE)
    assert flow.status is ProcessStatus.IDLE
    flow.set_password("pw", "pw")
    assert flow.status is ProcessStatus.READY
    container, name = flow.run()
    assert name == "hello.txt.enc"
    assert flow.state == FlowState(ProcessStatus.SUCCESS, "Encryption Complete")
    assert flow.result == (container, name)


def test_encrypt_flow_options() -> None:
    flow = EncryptFlow()
    flow.select_file(SOURCE)
    flow.set_password("pw", "pw")
    flow.set_options(compress=True, hide_name=True)
    container, name = flow.run()
    assert name == "secure_vault_data.enc"
    assert container[28] == 1


def test_encrypt_flow_password_mismatch() -> None:
    flow = EncryptFlow()
    flow.select_file(SOURCE)
    flow.set_password("pw", "pw2")
    with pytest.raises(InputValidationError):
        flow.run()
    assert flow.state == FlowState(ProcessStatus.ERROR, PASSWORD_MISMATCH_MESSAGE)
    flow.set_password("pw", "pw")
    assert flow.status is ProcessStatus.READY
    flow.run()
    assert flow.status is ProcessStatus.SUCCESS


def test_run_requires_ready() -> None:
    flow = EncryptFlow()
    with pytest.raises(InvalidTransitionError):
        flow.run()
    flow.select_file(SOURCE)
    flow.set_password("", "")
    assert flow.status is ProcessStatus.IDLE
    with pytest.raises(InvalidTransitionError):
        flow.run()


def test_success_is_terminal_until_new_input() -> None:
    flow = EncryptFlow()
    flow.select_file(SOURCE)
    flow.set_password("pw", "pw")
    flow.run()
    with pytest.raises(InvalidTransitionError):
        flow.run()
    flow.select_file(SourceFile(b"other", "other.bin"))
    assert flow.result is None
    # password was dropped after success
    assert flow.status is ProcessStatus.IDLE


def test_reset() -> None:
    flow = EncryptFlow()
    flow.select_file(SOURCE)
    flow.set_password("pw", "pw")
    flow.reset()
    assert flow.state == FlowState(ProcessStatus.IDLE)
    with pytest.raises(InvalidTransitionError):
        flow.run()


def test_reset_clears_options() -> None:
    flow = EncryptFlow()
    flow.select_file(SOURCE)
    flow.set_options(compress=True, hide_name=True)
    flow.set_password("pw", "pw")
    flow.run()

    flow.reset()
    flow.select_file(SOURCE)
    flow.set_password("pw", "pw")
    container, name = flow.run()
    assert name == "hello.txt.enc"
    assert container[28] == 0


def test_flow_base_is_abstract() -> None:
    from filecryption.workflow import _Flow

    with pytest.raises(TypeError):
        _Flow()  # type: ignore[abstract]


def test_decrypt_flow_retry_after_wrong_password() -> None:
    container = _encrypted("correct")
    flow = DecryptFlow()
    flow.select_container(container, "hello.txt.enc")
    flow.set_password("wrong")
    with pytest.raises(AuthenticationError):
        flow.run()
    assert flow.state == FlowState(ProcessStatus.ERROR, "Wrong password or corrupted file")
    assert flow.result is None

    flow.set_password("correct")
    result = flow.run()
    assert flow.state == FlowState(ProcessStatus.SUCCESS, "Decryption Complete")
    assert (result.data, result.name, result.mime_type) == (
        b"HELLOWORLD",
        "hello.txt",
        "text/plain",
    )


def test_decrypt_flow_error_state_allows_rerun() -> None:
    flow = DecryptFlow()
    flow.select_container(b"short", "x.enc")
    flow.set_password("pw")
    for _ in range(2):
        with pytest.raises(FormatError):
            flow.run()
        assert flow.status is ProcessStatus.ERROR


def test_flows_do_not_share_state() -> None:
    a, b = DecryptFlow(), DecryptFlow()
    a.select_container(b"x" * 40)
    a.set_password("pw")
    assert a.status is ProcessStatus.READY
    assert b.status is ProcessStatus.IDLE
