"""
Serial communication handler for the ECG Monitor.
Wraps pyserial behind the acquisition contract used by the session.
"""

import codecs
import errno
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

import serial
import serial.tools.list_ports

from config import BAUD_RATE, READ_CHUNK_SIZE, SERIAL_TIMEOUT

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Base class for acquisition transport failures."""


class NotSupported(TransportError):
    """The host has no serial capability."""


class PermissionDenied(TransportError):
    """Access to the selected device was refused."""


class UserCancelled(TransportError):
    """The user dismissed the port selection."""


class OpenFailure(TransportError):
    """The device exists but could not be opened."""


class StreamFailure(TransportError):
    """A read failed after the stream was opened."""


@dataclass(frozen=True)
class PortHandle:
    """A granted, not yet opened, serial device."""
    device: str


def get_available_ports() -> List[str]:
    """Get list of available COM ports."""
    return [port.device for port in serial.tools.list_ports.comports()]


def choose_port(current: str, ports: List[str]) -> str:
    """Keep a typed or command-line port, otherwise default to the first one listed."""
    if current:
        return current
    return ports[0] if ports else ""


class SerialStream:
    """An open serial port yielding decoded text chunks."""

    def __init__(self, ser: serial.Serial):
        self.ser = ser
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='ignore')
        self._cancelled = threading.Event()
        self._closed = False

    def next_chunk(self) -> Optional[str]:
        """
        Block until text arrives.

        Returns:
            Decoded text, or None at end of stream (cancelled or closed)

        Raises:
            StreamFailure: If the port fails while reading
        """
        while not self._cancelled.is_set():
            try:
                data = self.ser.read(self.ser.in_waiting or 1)
                if data and self.ser.in_waiting:
                    data += self.ser.read(min(self.ser.in_waiting, READ_CHUNK_SIZE))
            except (serial.SerialException, OSError, TypeError) as e:
                # pyserial raises TypeError when the port is closed under a pending read
                if self._cancelled.is_set():
                    return None
                raise StreamFailure(str(e)) from e
            if data:
                text = self._decoder.decode(data)
                if text:
                    return text
        return None

    def cancel(self):
        """Release a pending read; safe to call repeatedly."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        try:
            self.ser.cancel_read()
        except (AttributeError, serial.SerialException, OSError):
            pass

    def close(self):
        """Close the port; safe to call repeatedly."""
        self.cancel()
        if self._closed:
            return
        self._closed = True
        try:
            self.ser.close()
        except (serial.SerialException, OSError) as e:
            logger.warning("Error while closing %s: %s", self.ser.port, e)


class SerialTransport:
    """Grants access to and opens serial devices."""

    def __init__(self, port_getter: Callable[[], Optional[str]],
                 serial_factory: Callable[..., serial.Serial] = serial.Serial):
        """
        Initialize the transport.

        Args:
            port_getter: Function returning the port the user picked, or None
            serial_factory: Constructor for the underlying port object
        """
        self.port_getter = port_getter
        self.serial_factory = serial_factory

    def request_access(self) -> PortHandle:
        """
        Resolve the user's port choice into a handle.

        The port does not have to be enumerated; virtual and pty devices are
        accepted and fail later in ``open`` if they cannot be used.
        """
        port = self.port_getter()
        if not port:
            raise UserCancelled("No serial port selected")
        return PortHandle(port)

    def open(self, handle: PortHandle, baud_rate: int = BAUD_RATE) -> SerialStream:
        try:
            ser = self.serial_factory(handle.device, baud_rate, timeout=SERIAL_TIMEOUT)
            ser.reset_input_buffer()
        except NotImplementedError as e:
            raise NotSupported(f"Serial access is not supported on this host: {e}") from e
        except (serial.SerialException, OSError, ValueError) as e:
            if getattr(e, "errno", None) in (errno.EACCES, errno.EPERM):
                raise PermissionDenied(f"Access to {handle.device} denied: {e}") from e
            raise OpenFailure(f"Failed to open {handle.device}: {e}") from e
        logger.info("Opened %s at %d baud", handle.device, baud_rate)
        return SerialStream(ser)


# Posted after the last chunk when the stream ends normally
END_OF_STREAM = object()


class SerialReader(threading.Thread):
    """Background reader that forwards stream chunks into a queue."""

    def __init__(self, stream: SerialStream, chunk_queue: "queue.Queue"):
        super().__init__(daemon=True, name="serial-reader")
        self.stream = stream
        self.chunk_queue = chunk_queue

    def run(self):
        """Main thread loop for reading serial data."""
        try:
            while True:
                chunk = self.stream.next_chunk()
                if chunk is None:
                    break
                self.chunk_queue.put(chunk)
        except StreamFailure as e:
            logger.error("Serial read failed: %s", e)
            self.chunk_queue.put(e)
            return
        self.chunk_queue.put(END_OF_STREAM)

    def cancel(self):
        self.stream.cancel()
