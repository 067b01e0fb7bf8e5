#!python3
"""
Shared regular-expression fragments for JVM fatal error logs.

The fragments are plain strings so that grammars can splice them into larger
patterns. A handful of fully compiled helpers used by several modules are
exported as well.

Fragments:
- ADDRESS / ADDRESS32 / ADDRESS64: 32 or 64 bit addresses, optional 0x prefix
- SIZE / SIZE2: byte sizes in the compact (``1024K``) and spaced (``1.00 GB``) forms
- TIMESTAMP: seconds since JVM start with millisecond precision
- MEMORY_REGION, PERMISSION, FILE_OFFSET, DEVICE_IDS, INODE: /proc/<pid>/maps columns
"""

import re


# =========================================================================
# Value fragments
# =========================================================================

ADDRESS32 = r"(?:(?:0x)?[0-9a-f]{8})"
ADDRESS64 = r"(?:(?:0x)?[0-9a-f]{16})"
# 64 bit first so a 16 digit address is never cut at 8 digits
ADDRESS = rf"(?:{ADDRESS64}|{ADDRESS32})"

# Any hex literal, used where the log prints shortened values (e.g. ``0x0``)
HEX = r"(?:0x[0-9a-fA-F]+)"

SIZE = r"(?:\d{1,10}(?:[\.,]\d)?[bBkKmMgG])"
SIZE2 = r"(?:\d+(?:[\.,]\d{2})? (?:KB|MB|GB))"

TIMESTAMP = r"\d{0,12}[\.,]\d{3}"

MEMORY_REGION = r"[0-9a-f]{8,16}-[0-9a-f]{8,16}"
PERMISSION = r"[rwxps\-]{4}"
FILE_OFFSET = r"[0-9a-f]{8}"
DEVICE_IDS = r"[0-9a-f]{2,3}:[0-9a-f]{2,4}"
INODE = r"[0-9]{1,10}"

NO_EVENTS = r"No [Ee]vents"


# =========================================================================
# Compiled helpers
# =========================================================================

BLANK_LINE = re.compile(r"^\s*$")

# [error occurred during error reporting (printing memory info), id 0xb]
ERROR_SENTINEL = re.compile(
    r"^\[error occurred during error reporting \((?:printing |inspecting )?(?P<step>[^)]*)\)"
    r"(?:, id (?P<id>0x[0-9a-fA-F]+))?.*\]?\s*$"
)

BRACE_OPEN = "{"
BRACE_CLOSE = "}"


def brace_delta(text: str) -> int:
    """Net change in curly brace depth contributed by a line."""
    return text.count(BRACE_OPEN) - text.count(BRACE_CLOSE)
