"""
Data models for the ECG Monitor application.
Handles sample storage, the lead-off alarm and the acquisition mode.
"""

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from config import ALARM_DURATION_MS, BUFFER_CAPACITY


@dataclass(frozen=True)
class Sample:
    """A single decoded measurement."""
    time: int                   # Milliseconds since epoch
    value: int                  # Raw ADC value, not range checked


@dataclass(frozen=True)
class SampleEvent:
    """Parser output carrying a sample value."""
    value: int


@dataclass(frozen=True)
class FaultMarker:
    """Parser output for a lead-off token."""


ParseEvent = Union[SampleEvent, FaultMarker]


class SampleBuffer:
    """Bounded, insertion-ordered history of samples (oldest evicted first)."""

    def __init__(self, capacity: int = BUFFER_CAPACITY):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._samples: deque = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def append(self, sample: Sample):
        """Add a sample, evicting the oldest one when full."""
        with self._lock:
            self._samples.append(sample)

    def snapshot(self) -> List[Sample]:
        """Get a copy of all samples for the reader."""
        with self._lock:
            return list(self._samples)

    def clear(self):
        with self._lock:
            self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)


@dataclass
class AlarmState:
    """
    Lead-off alarm with an expiry timestamp.

    A trigger arms the alarm until ``trigger time + duration``; triggering
    again while active pushes the expiry out from the newer trigger.
    """
    active: bool = False
    expires_at: Optional[int] = None
    duration_ms: int = ALARM_DURATION_MS

    def trigger(self, now_ms: int):
        self.active = True
        self.expires_at = now_ms + self.duration_ms

    def refresh(self, now_ms: int) -> bool:
        """Expire the alarm if its window has elapsed and return the flag."""
        if self.active and self.expires_at is not None and now_ms >= self.expires_at:
            self.clear()
        return self.active

    def clear(self):
        self.active = False
        self.expires_at = None


class ModeKind(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    SYNTHETIC = "synthetic"


@dataclass(frozen=True)
class AcquisitionMode:
    """
    Tagged acquisition state.

    Only three shapes exist: disconnected (never monitoring), connected and
    synthetic, each of the latter with a monitoring flag. Use the factory
    class methods to build values.
    """
    kind: ModeKind = ModeKind.DISCONNECTED
    monitoring: bool = False

    def __post_init__(self):
        if self.kind is ModeKind.DISCONNECTED and self.monitoring:
            raise ValueError("a disconnected session cannot be monitoring")

    @classmethod
    def disconnected(cls) -> "AcquisitionMode":
        return cls(ModeKind.DISCONNECTED, False)

    @classmethod
    def connected(cls, monitoring: bool = False) -> "AcquisitionMode":
        return cls(ModeKind.CONNECTED, monitoring)

    @classmethod
    def synthetic(cls, monitoring: bool = True) -> "AcquisitionMode":
        return cls(ModeKind.SYNTHETIC, monitoring)

    @property
    def is_connected(self) -> bool:
        return self.kind is ModeKind.CONNECTED

    @property
    def is_synthetic(self) -> bool:
        return self.kind is ModeKind.SYNTHETIC

    @property
    def is_disconnected(self) -> bool:
        return self.kind is ModeKind.DISCONNECTED

    def with_monitoring(self, monitoring: bool) -> "AcquisitionMode":
        return AcquisitionMode(self.kind, monitoring)
