#!python3
"""
Automatic JVM fatal error log detection for jvmcrash.

This module sniffs the beginning of a file to decide whether it is a JVM
fatal error log before the full parse runs. It examines the banner lines a
crashing JVM writes first, the section headings that follow, and as a last
resort how many sampled lines the classifier recognises.

Supported detections:
- "A fatal error has been detected by the Java Runtime Environment" banner
- Signal / exception / internal error / native OOM banner lines
- T H R E A D and S U M M A R Y headings
- Recognised-line ratio over the sample
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .classifier import LineClassifier
from .kinds import EventKind
from .utils import decode_crash_log


# =========================================================================
# Pre-compiled module-level constants
# =========================================================================

FATAL_ERROR_BANNER = re.compile(r"^#\s*A fatal error has been detected by the Java Runtime Environment:?\s*$")

# ---- Banner lines naming the failure ----
# Each tuple: (compiled_regex, failure name, example)
# Order matters: the signal line also matches the generic "#  " prefix of the others.
FAILURE_BANNERS = [
    (re.compile(r"^#\s+SIG\w+ \(0x[0-9a-fA-F]+\) at pc="), "signal",
     "#  SIGSEGV (0xb) at pc=0x00007fcbd05a3b71, pid=52385, tid=0x00007fcbcc677700"),
    (re.compile(r"^#\s+EXCEPTION_\w+ \(0x[0-9a-fA-F]+\) at pc="), "exception",
     "#  EXCEPTION_ACCESS_VIOLATION (0xc0000005) at pc=0x000000006d8a3d1e, pid=4242, tid=0x0000000000001a2c"),
    (re.compile(r"^#\s+Internal Error \("), "internal_error",
     "#  Internal Error (ciEnv.hpp:172), pid=6570, tid=0x00007fe3d7dfd700"),
    (re.compile(r"^#\s+(?:There is insufficient memory|Native memory allocation)"), "native_oom",
     "# There is insufficient memory for the Java Runtime Environment to continue."),
]

HEADING_MARKERS = (
    "---------------  T H R E A D  ---------------",
    "---------------  S U M M A R Y ------------",
    "---------------  P R O C E S S  ---------------",
    "---------------  S Y S T E M  ---------------",
)

_WINDOWS_HINT = re.compile(r"EXCEPTION_\w+|windows-amd64|windows-x86|\.dll\b")
_LINUX_HINT = re.compile(r"linux-(?:amd64|aarch64|ppc64le|x86|s390x)|libjvm\.so|/proc/")

# Recognised-line ratio above which an unbannered file still counts as a crash log
RECOGNISED_RATIO = 0.6


@dataclass
class DetectionResult:
    """Result of crash log detection."""

    # True when the file looks like a JVM fatal error log
    is_crash_log: bool

    # Detection confidence: 'high', 'medium', 'low'
    confidence: str

    # Failure named by the banner ('signal', 'exception', 'internal_error',
    # 'native_oom') or None when no banner line was found
    failure: Optional[str] = None

    # 'linux', 'windows' or None when the sample gives no hint
    platform: Optional[str] = None

    # Human-readable description of the detection
    details: str = ""

    # Additional metadata from detection
    metadata: Dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = ["jvm crash log" if self.is_crash_log else "not a crash log"]
        parts.append(f"confidence={self.confidence}")
        if self.failure:
            parts.append(f"failure={self.failure}")
        if self.platform:
            parts.append(f"platform={self.platform}")
        return ", ".join(parts)


class CrashLogDetector:
    """
    Detector for JVM fatal error logs.

    Usage:
        detector = CrashLogDetector(logger=logger)
        result = detector.detect(Path("hs_err_pid52385.log"))
        print(result.is_crash_log)   # True
        print(result.failure)        # 'signal'
    """

    # Number of lines/bytes to sample for content analysis
    SAMPLE_LINES = 40
    SAMPLE_BYTES = 65536  # 64KB

    def __init__(self, logger: Optional[logging.Logger] = None, classifier: Optional[LineClassifier] = None):
        """
        Initialize CrashLogDetector.

        Args:
            logger: Logger instance (creates default if None)
            classifier: LineClassifier used for the recognised-line ratio
        """
        self.logger = logger or logging.getLogger(__name__)
        self.classifier = classifier or LineClassifier()

    # ----------------------------------------------------------------
    # Public API
    # ----------------------------------------------------------------

    def detect(self, file_path: Path) -> DetectionResult:
        """
        Detect whether a file is a JVM fatal error log.

        Args:
            file_path: Path to the file to analyze

        Returns:
            DetectionResult
        """
        file_path = Path(file_path)

        if not file_path.is_file():
            self.logger.debug(f"Detection: file not found: {file_path}")
            return self._negative(f"File not found: {file_path}")

        try:
            lines = self._read_sample(file_path)
        except OSError as e:
            self.logger.debug(f"Detection: cannot read file {file_path}: {e}")
            return self._negative(f"Cannot read file: {e}")

        if not lines:
            return self._negative("File is empty")

        return self.detect_lines(lines)

    def detect_lines(self, lines: List[str]) -> DetectionResult:
        """
        Detect from already decoded lines.

        Args:
            lines: first lines of the candidate file

        Returns:
            DetectionResult
        """
        sample = lines[:self.SAMPLE_LINES]
        platform = self._guess_platform(sample)
        failure, failure_line = self._find_failure(sample)

        if any(FATAL_ERROR_BANNER.match(line) for line in sample):
            return DetectionResult(
                is_crash_log=True,
                confidence="high",
                failure=failure,
                platform=platform,
                details="Fatal error banner found",
                metadata={"failure_line": failure_line},
            )

        if failure:
            return DetectionResult(
                is_crash_log=True,
                confidence="medium",
                failure=failure,
                platform=platform,
                details=f"Failure banner line found ({failure})",
                metadata={"failure_line": failure_line},
            )

        heading = next((line.strip() for line in sample if line.strip() in HEADING_MARKERS), None)
        if heading:
            return DetectionResult(
                is_crash_log=True,
                confidence="medium",
                platform=platform,
                details=f"Crash log heading found: {heading}",
            )

        recognised, total = self._recognised_lines(sample)
        ratio = recognised / total if total else 0.0
        if ratio >= RECOGNISED_RATIO:
            return DetectionResult(
                is_crash_log=True,
                confidence="low",
                platform=platform,
                details=f"{recognised}/{total} sampled lines recognised",
                metadata={"recognised_ratio": ratio},
            )

        return self._negative(f"Only {recognised}/{total} sampled lines recognised",
                              metadata={"recognised_ratio": ratio})

    # ----------------------------------------------------------------
    # Internal
    # ----------------------------------------------------------------

    def _read_sample(self, file_path: Path) -> List[str]:
        with open(file_path, "rb") as f:
            sample_bytes = f.read(self.SAMPLE_BYTES)
        return decode_crash_log(sample_bytes, logger=self.logger).splitlines()[:self.SAMPLE_LINES]

    @staticmethod
    def _find_failure(lines: List[str]) -> Tuple[Optional[str], Optional[str]]:
        for line in lines:
            for regex, name, _ in FAILURE_BANNERS:
                if regex.match(line):
                    return name, line
        return None, None

    @staticmethod
    def _guess_platform(lines: List[str]) -> Optional[str]:
        text = "\n".join(lines)
        if _WINDOWS_HINT.search(text):
            return "windows"
        if _LINUX_HINT.search(text):
            return "linux"
        return None

    def _recognised_lines(self, lines: List[str]) -> Tuple[int, int]:
        """Count non-blank lines the classifier recognises without section context."""
        meaningful = [line for line in lines if line.strip()]
        recognised = sum(
            1 for line in meaningful
            if self.classifier.classify(line) not in (EventKind.UNKNOWN, EventKind.NUMBER)
        )
        return recognised, len(meaningful)

    @staticmethod
    def _negative(reason: str, metadata: Optional[Dict] = None) -> DetectionResult:
        return DetectionResult(
            is_crash_log=False,
            confidence="low",
            details=reason,
            metadata=metadata or {},
        )
