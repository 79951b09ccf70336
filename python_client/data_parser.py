"""
Line protocol parser for the ECG serial stream.
Turns raw text chunks into sample and lead-off events.
"""

import logging
import re
from typing import List

from config import FAULT_TOKEN
from data_models import FaultMarker, ParseEvent, SampleEvent

logger = logging.getLogger(__name__)

INTEGER_RE = re.compile(r'[+-]?[0-9]+')


class LineParser:
    """Parses newline-delimited samples, carrying partial lines between chunks."""

    def __init__(self):
        self._carry = ""

    def feed(self, chunk: str) -> List[ParseEvent]:
        """
        Parse a chunk of text from the device.

        Args:
            chunk: Raw decoded text, not necessarily ending on a line boundary

        Returns:
            Events for every complete line, in arrival order
        """
        self._carry += chunk
        lines = self._carry.split('\n')
        self._carry = lines.pop()

        events: List[ParseEvent] = []
        for line in lines:
            event = self.parse_line(line)
            if event is not None:
                events.append(event)
        return events

    @staticmethod
    def parse_line(line: str):
        """Parse one complete line; returns None for noise."""
        trimmed = line.strip()
        if trimmed == FAULT_TOKEN:
            return FaultMarker()
        if INTEGER_RE.fullmatch(trimmed):
            # Range is deliberately not checked here
            return SampleEvent(int(trimmed))
        if trimmed:
            logger.debug("Dropping unparseable line %r", trimmed)
        return None

    def reset(self):
        """Forget any partial line."""
        self._carry = ""

    @property
    def pending(self) -> str:
        return self._carry
