"""
Tests for CrashLogDetector - JVM fatal error log sniffing.

Tests cover:
- Fatal error banner detection
- Failure banner lines without the fatal error banner
- Section headings
- Recognised-line ratio
- Platform hints
- Edge cases: missing files, empty files, plain text
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from jvmcrash.detector import (
    FAILURE_BANNERS,
    FATAL_ERROR_BANNER,
    CrashLogDetector,
    DetectionResult,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def detector():
    """Create a CrashLogDetector with a test logger."""
    logger = logging.getLogger("test_detector")
    logger.setLevel(logging.DEBUG)
    return CrashLogDetector(logger=logger)


# =============================================================================
# Banner table
# =============================================================================

class TestBannerTable:
    """Tests for the failure banner regex table."""

    def test_examples_match_their_own_regex(self):
        for regex, name, example in FAILURE_BANNERS:
            assert regex.match(example), name

    def test_fatal_error_banner_variants(self):
        assert FATAL_ERROR_BANNER.match("# A fatal error has been detected by the Java Runtime Environment:")
        assert FATAL_ERROR_BANNER.match("#A fatal error has been detected by the Java Runtime Environment")
        assert not FATAL_ERROR_BANNER.match("A fatal error has been detected by the Java Runtime Environment:")


# =============================================================================
# Detection from lines
# =============================================================================

class TestDetectLines:
    """Tests for detect_lines()."""

    def test_linux_crash_is_high_confidence(self, detector, linux_sigsegv_lines):
        result = detector.detect_lines(linux_sigsegv_lines)

        assert result.is_crash_log
        assert result.confidence == "high"
        assert result.failure == "signal"
        assert result.platform == "linux"
        assert result.metadata["failure_line"].startswith("#  SIGSEGV")

    def test_windows_crash(self, detector, windows_access_violation_lines):
        result = detector.detect_lines(windows_access_violation_lines)

        assert result.confidence == "high"
        assert result.failure == "exception"
        assert result.platform == "windows"

    def test_failure_banner_without_fatal_error_banner(self, detector):
        result = detector.detect_lines([
            "#",
            "#  Internal Error (ciEnv.hpp:172), pid=6570, tid=0x00007fe3d7dfd700",
        ])

        assert result.is_crash_log
        assert result.confidence == "medium"
        assert result.failure == "internal_error"

    def test_native_oom_banner(self, detector):
        result = detector.detect_lines([
            "# There is insufficient memory for the Java Runtime Environment to continue.",
        ])
        assert result.failure == "native_oom"

    def test_heading_only(self, detector):
        result = detector.detect_lines(["", "---------------  T H R E A D  ---------------", ""])

        assert result.is_crash_log
        assert result.confidence == "medium"
        assert result.failure is None
        assert "T H R E A D" in result.details

    def test_recognised_ratio(self, detector):
        result = detector.detect_lines([
            "Registers:",
            "Heap:",
            "VM Arguments:",
            "timezone: UTC",
            "OS uptime: 3 days 8:33 hours",
        ])

        assert result.is_crash_log
        assert result.confidence == "low"
        assert result.metadata["recognised_ratio"] == 1.0

    def test_plain_text_is_rejected(self, detector):
        result = detector.detect_lines(["shopping list", "milk", "bread", "eggs"])

        assert not result.is_crash_log
        assert result.metadata["recognised_ratio"] == 0.0

    def test_blank_lines_only(self, detector):
        result = detector.detect_lines(["", "   ", ""])

        assert not result.is_crash_log
        assert result.metadata["recognised_ratio"] == 0.0

    def test_banner_beyond_sample_is_ignored(self, detector):
        lines = ["shopping list"] * CrashLogDetector.SAMPLE_LINES
        lines.append("# A fatal error has been detected by the Java Runtime Environment:")
        assert not detector.detect_lines(lines).is_crash_log

    def test_platform_unknown(self, detector):
        result = detector.detect_lines(["# A fatal error has been detected by the Java Runtime Environment:"])
        assert result.platform is None


# =============================================================================
# Detection from files
# =============================================================================

class TestDetectFile:
    """Tests for detect() on files."""

    def test_linux_file(self, detector, linux_crash_file):
        result = detector.detect(linux_crash_file)
        assert result.is_crash_log
        assert result.platform == "linux"

    def test_crlf_file(self, detector, windows_crash_file):
        result = detector.detect(windows_crash_file)
        assert result.is_crash_log
        assert result.failure == "exception"

    def test_accepts_string_path(self, detector, linux_crash_file):
        assert detector.detect(str(linux_crash_file)).is_crash_log

    def test_not_a_crash_file(self, detector, not_a_crash_file):
        assert not detector.detect(not_a_crash_file).is_crash_log

    def test_missing_file(self, detector, tmp_path):
        result = detector.detect(tmp_path / "missing.log")

        assert not result.is_crash_log
        assert result.details.startswith("File not found")

    def test_empty_file(self, detector, tmp_path):
        empty = tmp_path / "empty.log"
        empty.write_bytes(b"")

        result = detector.detect(empty)
        assert not result.is_crash_log
        assert result.details == "File is empty"

    def test_directory_is_not_a_file(self, detector, tmp_path):
        assert not detector.detect(tmp_path).is_crash_log


class TestDetectionResult:
    """Tests for DetectionResult string form."""

    def test_str_positive(self):
        result = DetectionResult(is_crash_log=True, confidence="high", failure="signal", platform="linux")
        assert str(result) == "jvm crash log, confidence=high, failure=signal, platform=linux"

    def test_str_negative(self):
        assert str(DetectionResult(is_crash_log=False, confidence="low")) == "not a crash log, confidence=low"
