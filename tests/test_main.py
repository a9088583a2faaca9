"""Tests for the console entry point helpers."""

import logging
from datetime import datetime, timedelta

from cm160meter.core import AppSettings, Sample
from cm160meter.main import PowerLogger, parse_args


def sample_at(when, current=7.0):
    return Sample(when.year, when.month, when.day, when.hour, when.minute, current, 0x51)


def test_fresh_sample_logs_power(caplog):
    caplog.set_level(logging.INFO)
    PowerLogger(voltage=100, max_age=120).on_sample(sample_at(datetime.now()))
    assert "7.00A * 100V = 700W" in caplog.text


def test_old_sample_is_skipped(caplog):
    caplog.set_level(logging.INFO)
    PowerLogger(voltage=100, max_age=120).on_sample(sample_at(datetime.now() - timedelta(hours=1)))
    assert "old date" in caplog.text
    assert " = " not in caplog.text


def test_invalid_date_is_skipped(caplog):
    bad = Sample(2024, 0, 15, 13, 45, 7.0, 0x59)
    PowerLogger(voltage=100, max_age=120).on_sample(bad)
    assert "Invalid date" in caplog.text


def test_parse_args_defaults_from_settings():
    settings = AppSettings(port="/dev/ttyUSB3", ac_voltage=230.0)
    args = parse_args([], settings)
    assert args.port == "/dev/ttyUSB3"
    assert args.voltage == 230.0
    assert args.baud == 250000
    assert args.max_age == 120
    assert not args.save


def test_parse_args_overrides():
    args = parse_args(["--port", "/dev/ttyUSB1", "--voltage", "240", "--timeout", "5"], AppSettings())
    assert args.port == "/dev/ttyUSB1"
    assert args.voltage == 240.0
    assert args.timeout == 5.0


def test_fractional_voltage_is_not_truncated(caplog):
    caplog.set_level(logging.INFO)
    PowerLogger(voltage=230.5, max_age=120).on_sample(sample_at(datetime.now()))
    assert "7.00A * 230.5V = 1613W" in caplog.text
