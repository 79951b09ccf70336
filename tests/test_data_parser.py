from data_models import FaultMarker, SampleEvent
from data_parser import LineParser


def test_samples_and_fault_marker_in_order() -> None:
    parser = LineParser()
    assert parser.feed("512\n!\n300\n") == [SampleEvent(512), FaultMarker(), SampleEvent(300)]


def test_non_numeric_lines_are_dropped() -> None:
    parser = LineParser()
    assert parser.feed("abc\n123\n") == [SampleEvent(123)]


def test_partial_line_carries_over() -> None:
    parser = LineParser()
    assert parser.feed("12") == []
    assert parser.pending == "12"
    assert parser.feed("3\n") == [SampleEvent(123)]
    assert parser.pending == ""


def test_out_of_range_values_pass_through() -> None:
    parser = LineParser()
    assert parser.feed("-5\n5000\n+7\n") == [SampleEvent(-5), SampleEvent(5000), SampleEvent(7)]


def test_whitespace_and_crlf_are_trimmed() -> None:
    parser = LineParser()
    assert parser.feed("  42 \r\n\t!\r\n") == [SampleEvent(42), FaultMarker()]


def test_noise_lines_yield_nothing() -> None:
    parser = LineParser()
    assert parser.feed("\n\n12abc\n1.5\n!!\n0x10\n") == []


def test_reset_discards_partial_line() -> None:
    parser = LineParser()
    parser.feed("99")
    parser.reset()
    assert parser.feed("1\n") == [SampleEvent(1)]
