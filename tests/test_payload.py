"""Tests for wire payload formatting."""

import pytest

from kpistat.payload import (
    KpiKind,
    PayloadError,
    encode,
    format_counter,
    format_gauge,
    format_scaled_counter,
)


class TestFormatCounter:
    """Tests for counter payloads."""

    def test_counter(self):
        """Test the basic counter template."""
        assert format_counter("requests.total", 42) == "c requests.total 42"

    def test_increment_by_one(self):
        """Test that an increment of one is written as 1."""
        assert format_counter("hits", 1) == "c hits 1"

    def test_negative_amount(self):
        """Test that signed amounts keep their sign."""
        assert format_counter("queue.depth", -3) == "c queue.depth -3"

    def test_zero_amount(self):
        assert format_counter("noop", 0) == "c noop 0"

    def test_large_amount(self):
        """Test that amounts beyond 32 bits are written in full."""
        assert format_counter("bytes", 2**40) == "c bytes 1099511627776"


class TestFormatScaledCounter:
    """Tests for scaled counter payloads."""

    def test_scaled_counter(self):
        """Test the scaled counter template."""
        assert format_scaled_counter("rows", 5, 100) == "c rows 5 100"

    def test_scale_is_not_applied_locally(self):
        """Test that the scale is passed through, never multiplied in."""
        payload = format_scaled_counter("rows", 7, 10)
        assert payload.split() == ["c", "rows", "7", "10"]

    def test_scale_one_matches_counter(self):
        """Test that a scale of 1 gives the plain counter payload."""
        assert format_scaled_counter("rows", 3, 1) == format_counter("rows", 3)
        assert format_scaled_counter("rows", 3, 1) == "c rows 3"

    def test_scale_zero_is_passed_through(self):
        """Test that scales other than 1 are always written."""
        assert format_scaled_counter("rows", 3, 0) == "c rows 3 0"


class TestFormatGauge:
    """Tests for gauge payloads."""

    def test_gauge(self):
        """Test the gauge template."""
        assert format_gauge("latency.ms", 137) == "g latency.ms 137"

    def test_negative_gauge(self):
        assert format_gauge("temperature", -12) == "g temperature -12"


class TestValidation:
    """Tests for rejected updates."""

    @pytest.mark.parametrize("name", ["", "two words", "tab\tname", "new\nline"])
    def test_bad_names(self, name):
        """Test that empty names and names with whitespace are rejected."""
        with pytest.raises(PayloadError):
            format_counter(name, 1)

    def test_non_string_name(self):
        """Test error message when the name is not a string."""
        with pytest.raises(PayloadError) as exc_info:
            format_gauge(None, 1)
        assert "non-empty string" in str(exc_info.value)

    @pytest.mark.parametrize("value", [1.5, "3", None, True])
    def test_bad_numbers(self, value):
        """Test that non-integer values are rejected."""
        with pytest.raises(PayloadError):
            format_gauge("x", value)

    def test_bad_scale(self):
        """Test that the scale must be an integer too."""
        with pytest.raises(PayloadError) as exc_info:
            format_scaled_counter("x", 1, 2.0)
        assert "scale" in str(exc_info.value)

    def test_payload_error_is_value_error(self):
        assert issubclass(PayloadError, ValueError)


def test_encode_is_utf8_without_newline():
    """Test that encoded payloads carry no trailing newline."""
    data = encode(format_counter("requests.total", 42))
    assert data == b"c requests.total 42"
    assert not data.endswith(b"\n")


def test_non_ascii_name_is_utf8():
    """Test that names are encoded as UTF-8."""
    assert encode(format_counter("café", 1)) == "c café 1".encode("utf-8")


def test_kind_values():
    """Test the single-letter kind markers."""
    assert KpiKind.COUNTER.value == "c"
    assert KpiKind.GAUGE.value == "g"
