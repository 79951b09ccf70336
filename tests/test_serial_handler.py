import errno
import os
import queue
from typing import List, Optional

import pytest
import serial

from serial_handler import (END_OF_STREAM, NotSupported, OpenFailure, PermissionDenied,
                            PortHandle, SerialReader, SerialStream, SerialTransport,
                            StreamFailure, UserCancelled, choose_port)


class FakeSerial:
    """Minimal stand-in for serial.Serial fed from a list of byte chunks."""

    def __init__(self, chunks: List[bytes], error: Optional[Exception] = None) -> None:
        self.port = "/dev/fake"
        self.chunks = list(chunks)
        self.error = error
        self.stream: Optional[SerialStream] = None
        self.cancel_calls = 0
        self.close_calls = 0

    @property
    def in_waiting(self) -> int:
        return 0

    def read(self, size: int = 1) -> bytes:
        if self.chunks:
            return self.chunks.pop(0)
        if self.error is not None:
            raise self.error
        # Nothing left: behave like a timeout and let the test cancel
        if self.stream is not None:
            self.stream.cancel()
        return b""

    def cancel_read(self) -> None:
        self.cancel_calls += 1

    def close(self) -> None:
        self.close_calls += 1

    def reset_input_buffer(self) -> None:
        pass


def _stream(chunks: List[bytes], error: Optional[Exception] = None) -> SerialStream:
    fake = FakeSerial(chunks, error)
    stream = SerialStream(fake)
    fake.stream = stream
    return stream


def test_stream_returns_decoded_chunks() -> None:
    stream = _stream([b"512\n", b"", b"!\n"])
    assert stream.next_chunk() == "512\n"
    # an empty (timed out) read is not end of stream
    assert stream.next_chunk() == "!\n"
    assert stream.next_chunk() is None


def test_stream_reassembles_split_utf8() -> None:
    stream = _stream(["é1\n".encode()[:1], "é1\n".encode()[1:]])
    assert stream.next_chunk() == "é1\n"


def test_stream_failure_is_raised() -> None:
    stream = _stream([], error=serial.SerialException("device reports readiness to read but returned no data"))
    with pytest.raises(StreamFailure):
        stream.next_chunk()


def test_cancel_and_close_are_idempotent() -> None:
    stream = _stream([])
    stream.cancel()
    stream.cancel()
    stream.close()
    stream.close()
    assert stream.ser.cancel_calls == 1
    assert stream.ser.close_calls == 1
    assert stream.next_chunk() is None


def test_reader_forwards_chunks_then_end_marker() -> None:
    chunks: "queue.Queue" = queue.Queue()
    reader = SerialReader(_stream([b"1\n", b"2\n"]), chunks)
    reader.start()
    reader.join(timeout=2.0)
    assert [chunks.get_nowait() for _ in range(3)] == ["1\n", "2\n", END_OF_STREAM]


def test_reader_forwards_failure() -> None:
    chunks: "queue.Queue" = queue.Queue()
    reader = SerialReader(_stream([b"1\n"], error=OSError("gone")), chunks)
    reader.start()
    reader.join(timeout=2.0)
    assert chunks.get_nowait() == "1\n"
    assert isinstance(chunks.get_nowait(), StreamFailure)
    assert chunks.empty()


def test_request_access_accepts_unlisted_port() -> None:
    transport = SerialTransport(lambda: "/dev/pts/7")
    assert transport.request_access() == PortHandle("/dev/pts/7")


def test_open_without_serial_backend_is_not_supported() -> None:
    def unsupported(port, baud, timeout):
        raise NotImplementedError("no serial backend")

    with pytest.raises(NotSupported):
        SerialTransport(lambda: "x", serial_factory=unsupported).open(PortHandle("x"))


def test_request_access_without_selection_is_cancelled() -> None:
    transport = SerialTransport(lambda: "")
    with pytest.raises(UserCancelled):
        transport.request_access()


def test_request_access_returns_handle() -> None:
    transport = SerialTransport(lambda: "COM3")
    assert transport.request_access() == PortHandle("COM3")


def test_open_passes_baud_rate() -> None:
    calls = []

    def factory(port, baud, timeout):
        calls.append((port, baud))
        return FakeSerial([])

    transport = SerialTransport(lambda: "COM3", serial_factory=factory)
    stream = transport.open(PortHandle("COM3"))
    assert isinstance(stream, SerialStream)
    assert calls == [("COM3", 9600)]


def test_open_errors_are_classified() -> None:
    def busy(port, baud, timeout):
        raise serial.SerialException(errno.EBUSY, "could not open port")

    def denied(port, baud, timeout):
        raise serial.SerialException(errno.EACCES, "could not open port")

    with pytest.raises(OpenFailure):
        SerialTransport(lambda: "x", serial_factory=busy).open(PortHandle("x"))
    with pytest.raises(PermissionDenied):
        SerialTransport(lambda: "x", serial_factory=denied).open(PortHandle("x"))


def test_choose_port_keeps_current_selection() -> None:
    assert choose_port("/dev/pts/7", ["/dev/ttyUSB0"]) == "/dev/pts/7"
    assert choose_port("", ["/dev/ttyUSB0", "/dev/ttyUSB1"]) == "/dev/ttyUSB0"
    assert choose_port("", []) == ""


@pytest.mark.skipif(not hasattr(os, "openpty"), reason="needs a pseudo-terminal")
def test_open_unlisted_pseudo_terminal() -> None:
    master, slave = os.openpty()
    try:
        transport = SerialTransport(lambda: os.ttyname(slave))
        stream = transport.open(transport.request_access())
        try:
            os.write(master, b"512\n")
            assert stream.next_chunk() == "512\n"
        finally:
            stream.close()
    finally:
        os.close(slave)
        os.close(master)
