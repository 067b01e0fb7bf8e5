#!python3
"""
Utility functions for jvmcrash.

This module contains:
- Logging initialization
- Error exit helpers
- File collection and selection/filtering utilities
- Crash log reading with encoding detection
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import chardet

from .console import get_rich_logger

# Fallback chain when chardet has no answer or its answer fails to decode
FALLBACK_ENCODINGS = ("utf-8", "ISO-8859-1")

# Bytes sampled for encoding detection
DETECTION_SAMPLE_SIZE = 64 * 1024


def quit_on_error(message, logger=None):
    """Log error message and exit with error code."""
    logger = logger or logging.getLogger(__name__)
    logger.error(message)
    sys.exit(1)


def check_if_exists(path, error_message, logger=None):
    """Check if the provided path is a file."""
    if not Path(path).is_file():
        quit_on_error(error_message, logger)


def init_logger(debug_mode, log_file=None, name='jvmcrash'):
    """Initialize logger with appropriate configuration.

    Args:
        debug_mode: Enable debug-level logging with verbose format
        log_file: Optional path to log file for persistent logging
        name: Logger name (default: 'jvmcrash')

    Returns:
        Configured logger instance
    """
    return get_rich_logger(name=name, debug=debug_mode, log_file=log_file)


def collect_files(paths: Iterable[str], pattern: str = "*", recursive: bool = True,
                  logger: Optional[logging.Logger] = None) -> List[Path]:
    """
    Expand files and directories into a sorted, de-duplicated file list.

    Args:
        paths: files or directories
        pattern: glob pattern applied inside directories
        recursive: descend into sub-directories
        logger: Logger for missing paths

    Returns:
        List of existing files; missing paths are reported and skipped
    """
    logger = logger or logging.getLogger(__name__)
    files = []
    for path in paths:
        candidate = Path(path)
        if candidate.is_file():
            files.append(candidate)
        elif candidate.is_dir():
            matches = candidate.rglob(pattern) if recursive else candidate.glob(pattern)
            files.extend(match for match in matches if match.is_file())
        else:
            logger.warning(f"[yellow][!] Input path not found, skipping: {path}[/]")
    return sorted(set(files))


def select_files(path_list, select_files_list):
    """Select files from path list based on filter criteria."""
    if select_files_list is None:
        return path_list

    filters = [file_filters[0].lower() for file_filters in select_files_list]
    return [str(element) for element in path_list
            if any(file_filter in str(element).lower() for file_filter in filters)]


def avoid_files(path_list, avoid_files_list):
    """Filter out files from path list based on exclusion criteria."""
    if avoid_files_list is None:
        return path_list

    filters = [file_filters[0].lower() for file_filters in avoid_files_list]
    return [str(element) for element in path_list
            if all(file_filter not in str(element).lower() for file_filter in filters)]


def format_size(size):
    """Format byte size for human-readable display."""
    if size >= 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024 * 1024):.1f} GB"
    elif size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    elif size >= 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size} bytes"


def detect_encoding(raw: bytes) -> Optional[str]:
    """Best guess of the encoding of ``raw`` according to chardet (None when unsure)."""
    if not raw:
        return None
    guess = chardet.detect(raw[:DETECTION_SAMPLE_SIZE])
    return guess.get("encoding")


def decode_crash_log(raw: bytes, encoding: Optional[str] = None,
                     logger: Optional[logging.Logger] = None) -> str:
    """
    Decode crash log bytes.

    An explicit encoding is used as-is. Otherwise the chardet guess is tried
    first, then UTF-8, then ISO-8859-1 (which accepts any byte sequence).

    Args:
        raw: file content
        encoding: forced encoding, or None to detect
        logger: Logger for the chosen encoding

    Returns:
        Decoded text
    """
    logger = logger or logging.getLogger(__name__)
    if encoding:
        return raw.decode(encoding, errors="replace")

    candidates = [detect_encoding(raw)] + list(FALLBACK_ENCODINGS)
    for candidate in candidates:
        if not candidate:
            continue
        try:
            text = raw.decode(candidate)
        except (UnicodeDecodeError, LookupError):
            continue
        logger.debug(f"Decoded input as {candidate}")
        return text
    # ISO-8859-1 never fails, so this is unreachable in practice
    return raw.decode(FALLBACK_ENCODINGS[-1], errors="replace")


def read_crash_log(path, encoding: Optional[str] = None, logger: Optional[logging.Logger] = None) -> List[str]:
    """
    Read a crash log into a list of lines without line terminators.

    Args:
        path: file to read
        encoding: forced encoding, or None to detect with chardet
        logger: Logger instance

    Returns:
        List of lines (``\\n``, ``\\r\\n`` and ``\\r`` terminators are removed)
    """
    with open(path, "rb") as f:
        raw = f.read()
    return decode_crash_log(raw, encoding, logger).splitlines()
