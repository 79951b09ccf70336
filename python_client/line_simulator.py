"""
line_simulator.py

Simple simulator that emits serial lines like the ECG front-end firmware:
one integer per line at 100 Hz, with an occasional "!" when the leads come
off. Useful to validate the parser and the live mode without hardware, e.g.
through a virtual serial pair (socat, com0com).

Run: python python_client/line_simulator.py [--port /dev/pts/3] [--seconds 10]

"""
import argparse
import logging
import sys
import time
from typing import Iterator, Optional

import serial

from config import BAUD_RATE, FAULT_TOKEN, SYNTH_TICK_MS
from data_parser import LineParser
from waveform_synth import WaveformSynthesizer

logger = logging.getLogger(__name__)


def generate_lines(synth: WaveformSynthesizer, count: int) -> Iterator[str]:
    """Yield ``count`` ticks of wire-format lines, fault markers included."""
    for tick in range(count):
        yield f"{synth.sample(tick * SYNTH_TICK_MS)}\n"
        if synth.roll_fault():
            yield f"{FAULT_TOKEN}\n"


def run(port: Optional[str], seconds: float):
    synth = WaveformSynthesizer()
    parser = LineParser()
    ser = serial.Serial(port, BAUD_RATE) if port else None
    ticks = int(seconds * 1000 / SYNTH_TICK_MS)
    emitted = 0
    try:
        for line in generate_lines(synth, ticks):
            if ser is not None:
                ser.write(line.encode())
            else:
                sys.stdout.write(line)
                sys.stdout.flush()
            # Parse our own output the same way the monitor does
            emitted += len(parser.feed(line))
            if line.strip() != FAULT_TOKEN:
                time.sleep(SYNTH_TICK_MS / 1000)
    finally:
        if ser is not None:
            ser.close()
    logger.info("Simulation done. Events emitted: %d", emitted)


def main():
    arg_parser = argparse.ArgumentParser(description="Emit synthetic ECG serial lines")
    arg_parser.add_argument("--port", help="Serial port to write to (default: stdout)")
    arg_parser.add_argument("--seconds", type=float, default=10.0,
                            help="How long to run (default: 10)")
    args = arg_parser.parse_args()
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    logger.info("Starting ECG line simulator...")
    run(args.port, args.seconds)


if __name__ == '__main__':
    main()
