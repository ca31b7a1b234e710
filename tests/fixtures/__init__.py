"""
Fixtures package for sugarbit testing.

Payloads follow the report format served to the watch face: a JSON object
mapping ``YYYY.MM.DD - HH:MM:SS`` wall-clock timestamps to mmol/L readings.

Fixture modules:
- payloads: report payloads (regular, gappy, malformed) and a fixed "now"

Usage:
    def test_load(two_reading_payload, now_1006):
        series = SampleSeries.load(two_reading_payload, now_1006, 3 * 3600)
"""

from .payloads import *
