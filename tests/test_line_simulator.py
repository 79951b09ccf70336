import random

from data_models import FaultMarker, SampleEvent
from data_parser import LineParser
from line_simulator import generate_lines
from waveform_synth import WaveformSynthesizer


def test_generated_lines_parse_back() -> None:
    synth = WaveformSynthesizer(rng=random.Random(3), fault_probability=0.05)
    parser = LineParser()
    events = parser.feed("".join(generate_lines(synth, 400)))

    samples = [e for e in events if isinstance(e, SampleEvent)]
    faults = [e for e in events if isinstance(e, FaultMarker)]
    assert len(samples) == 400
    assert faults
    assert all(0 <= e.value <= 1023 for e in samples)


def test_noise_free_lines_follow_the_waveform() -> None:
    synth = WaveformSynthesizer(noise_amplitude=0, fault_probability=0)
    lines = list(generate_lines(synth, 20))
    # tick 19 is 190 ms into the cycle, just before the R peak
    assert lines[0] == "512\n"
    assert int(lines[19]) > 700
