"""
Acquisition session for the ECG Monitor.

The session owns the acquisition mode and decides which producer writes into
the sample buffer: the line parser fed by a serial reader while connected, or
the waveform synthesizer while in demo mode. Every mutation of the buffer and
the alarm happens on the scheduler's thread; the serial reader thread only
hands raw chunks over through a queue.
"""

import logging
import queue
from dataclasses import dataclass
from typing import Callable, List, Optional

from config import BAUD_RATE, SERIAL_POLL_MS, SERIAL_TIMEOUT, SYNTH_TICK_MS
from data_models import (AcquisitionMode, AlarmState, FaultMarker, Sample,
                         SampleBuffer, SampleEvent)
from data_parser import LineParser
from serial_handler import (END_OF_STREAM, SerialReader, SerialStream,
                            StreamFailure, TransportError)
from waveform_synth import WaveformSynthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """User-facing message emitted by the session."""
    level: str          # "info", "success", "warning" or "error"
    message: str


class AcquisitionSession:
    """State machine arbitrating between live and synthetic acquisition."""

    def __init__(self, transport, scheduler,
                 synthesizer: Optional[WaveformSynthesizer] = None,
                 buffer: Optional[SampleBuffer] = None,
                 on_notice: Optional[Callable[[Notice], None]] = None):
        """
        Initialize the session.

        Args:
            transport: Object with ``request_access()`` and ``open(handle, baud_rate)``
            scheduler: Object with ``now_ms()``, ``call_later()`` and ``cancel()``
            synthesizer: Demo-mode waveform source
            buffer: Sample history shared with the renderer
            on_notice: Callback receiving user-facing notices
        """
        self.transport = transport
        self.scheduler = scheduler
        self.synthesizer = synthesizer or WaveformSynthesizer()
        self.buffer = buffer or SampleBuffer()
        self.alarm = AlarmState()
        self.parser = LineParser()
        self.on_notice = on_notice
        self.mode = AcquisitionMode.disconnected()
        self.current_value = 0

        self.stream: Optional[SerialStream] = None
        self.reader: Optional[SerialReader] = None
        self.chunk_queue: "queue.Queue" = queue.Queue()
        self._poll_timer = None
        self._synth_timer = None
        self._synth_start: Optional[int] = None
        self._listeners: List[Callable[[AcquisitionMode], None]] = []

    # Observers
    def add_listener(self, callback: Callable[[AcquisitionMode], None]):
        """Register a callback invoked with the new mode after each transition."""
        self._listeners.append(callback)

    def _set_mode(self, mode: AcquisitionMode):
        if mode == self.mode:
            return
        logger.info("Mode %s -> %s", self._describe(self.mode), self._describe(mode))
        self.mode = mode
        for callback in list(self._listeners):
            callback(mode)

    @staticmethod
    def _describe(mode: AcquisitionMode) -> str:
        if mode.is_disconnected:
            return mode.kind.value
        return f"{mode.kind.value}(monitoring={mode.monitoring})"

    def _notify(self, level: str, message: str):
        if self.on_notice:
            self.on_notice(Notice(level, message))

    def _reject(self, message: str) -> bool:
        logger.warning("Rejected: %s", message)
        self._notify("warning", message)
        return False

    # Read-only views
    @property
    def monitoring(self) -> bool:
        return self.mode.monitoring

    @property
    def alarm_active(self) -> bool:
        return self.alarm.refresh(self.scheduler.now_ms())

    # Transitions
    def connect(self) -> bool:
        """Acquire a serial device and start reading from it."""
        if self.mode.is_connected:
            return self._reject("Already connected to a device")
        # Demo mode is not checked here; a successful open replaces the synthesizer
        try:
            handle = self.transport.request_access()
            stream = self.transport.open(handle, baud_rate=BAUD_RATE)
        except TransportError as e:
            logger.error("Connection failed: %s", e)
            self._notify("error", f"Failed to connect to device: {e}")
            return False

        self._stop_synthesizer()
        self.buffer.clear()
        self.alarm.clear()
        self.stream = stream
        self.parser.reset()
        self.chunk_queue = queue.Queue()
        self.reader = SerialReader(stream, self.chunk_queue)
        self.reader.start()
        self._poll_timer = self.scheduler.call_later(SERIAL_POLL_MS, self._poll_serial)
        self._set_mode(AcquisitionMode.connected(monitoring=False))
        self._notify("success", "Connected to device")
        return True

    def disconnect(self) -> bool:
        """Cancel the pending read and close the device. No-op when not connected."""
        if not self.mode.is_connected:
            return False
        self._teardown_stream()
        self._set_mode(AcquisitionMode.disconnected())
        self._notify("info", "Disconnected from device")
        return True

    def toggle_monitoring(self) -> bool:
        if self.mode.is_disconnected:
            return self._reject("Please connect to a device or enable demo mode first")
        monitoring = not self.mode.monitoring
        if self.mode.is_synthetic:
            if monitoring:
                self._start_synthesizer()
            else:
                self._stop_synthesizer()
        self._set_mode(self.mode.with_monitoring(monitoring))
        return True

    def enable_synthetic(self) -> bool:
        """Switch to demo mode and start generating samples."""
        if self.mode.is_connected:
            return self._reject("Disconnect from the device first")
        if self.mode.is_synthetic:
            return True
        self.buffer.clear()
        self.alarm.clear()
        self._start_synthesizer()
        self._set_mode(AcquisitionMode.synthetic(monitoring=True))
        self._notify("success", "Demo mode enabled")
        return True

    def disable_synthetic(self) -> bool:
        if not self.mode.is_synthetic:
            return self._reject("Demo mode is not enabled")
        self._stop_synthesizer()
        self.buffer.clear()
        self.alarm.clear()
        self._set_mode(AcquisitionMode.disconnected())
        self._notify("info", "Demo mode disabled")
        return True

    def clear(self):
        """Empty the sample history without changing mode."""
        self.buffer.clear()
        self.alarm.clear()
        self._notify("info", "Data cleared")

    def shutdown(self):
        """Stop every producer and release the device."""
        self._stop_synthesizer()
        self._teardown_stream()
        self._set_mode(AcquisitionMode.disconnected())

    # Producers
    def _append(self, now_ms: int, value: int):
        self.buffer.append(Sample(now_ms, value))
        self.current_value = value

    def _trigger_alarm(self, now_ms: int):
        if not self.alarm.refresh(now_ms):
            logger.warning("Lead-off detected")
        self.alarm.trigger(now_ms)

    def _start_synthesizer(self):
        self._stop_synthesizer()
        self._synth_start = self.scheduler.now_ms()
        self._synth_timer = self.scheduler.call_later(SYNTH_TICK_MS, self._synth_tick)

    def _stop_synthesizer(self):
        if self._synth_timer is not None:
            self.scheduler.cancel(self._synth_timer)
            self._synth_timer = None
        self._synth_start = None

    def _synth_tick(self):
        self._synth_timer = self.scheduler.call_later(SYNTH_TICK_MS, self._synth_tick)
        now = self.scheduler.now_ms()
        self._append(now, self.synthesizer.sample(now - self._synth_start))
        if self.synthesizer.roll_fault():
            self._trigger_alarm(now)

    def feed_chunk(self, chunk: str):
        """Parse serial text and apply the resulting events."""
        now = self.scheduler.now_ms()
        for event in self.parser.feed(chunk):
            if isinstance(event, FaultMarker):
                self._trigger_alarm(now)
            elif isinstance(event, SampleEvent):
                self._append(now, event.value)

    def _poll_serial(self):
        self._poll_timer = None
        while True:
            try:
                item = self.chunk_queue.get_nowait()
            except queue.Empty:
                break
            if isinstance(item, StreamFailure):
                self._on_stream_failure(item)
                return
            if item is END_OF_STREAM:
                logger.info("Serial stream ended")
                return
            self.feed_chunk(item)
        self._poll_timer = self.scheduler.call_later(SERIAL_POLL_MS, self._poll_serial)

    def _on_stream_failure(self, error: StreamFailure):
        logger.error("Connection lost: %s", error)
        self._teardown_stream()
        self._set_mode(AcquisitionMode.disconnected())
        self._notify("error", "Connection lost")

    def _teardown_stream(self):
        if self._poll_timer is not None:
            self.scheduler.cancel(self._poll_timer)
            self._poll_timer = None
        if self.reader is not None:
            self.reader.cancel()
            # the port is closed only after the pending read has returned
            self.reader.join(timeout=SERIAL_TIMEOUT * 2)
            self.reader = None
        if self.stream is not None:
            self.stream.close()
            self.stream = None
        self.parser.reset()
