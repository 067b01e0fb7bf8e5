"""
Tests for DocumentAssembler and the crash facts it gathers.

Tests cover:
- One event per line, in input order
- Lenient and strict handling of grammar defects
- Line hashes
- Facts of Linux, Windows and truncated crash logs
"""

import logging
import sys
import types
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
import xxhash

from jvmcrash import (
    Arch,
    DocumentAssembler,
    EventKind,
    GrammarDefectError,
    HexAddress,
    LineClassifier,
    OsFamily,
    OsVendor,
    ParserConfig,
    Role,
    SignalCode,
    SignalNumber,
    parse_document,
)


class AlwaysRegisters(LineClassifier):
    """Classifier that claims every line is part of the Registers section."""

    def classify(self, line, state=None):
        return EventKind.REGISTERS


# =============================================================================
# Coverage and order
# =============================================================================

class TestCoverage:
    """Tests for one event per input line."""

    def test_one_event_per_line(self, linux_sigsegv_lines):
        document = parse_document(linux_sigsegv_lines)

        assert len(document) == len(linux_sigsegv_lines)
        assert [event.text for event in document.events] == linux_sigsegv_lines

    def test_indexes_follow_input_order(self, windows_access_violation_lines):
        document = parse_document(windows_access_violation_lines)
        assert [event.index for event in document.events] == list(range(len(windows_access_violation_lines)))

    def test_empty_input(self):
        document = parse_document([])
        assert len(document) == 0
        assert document.facts.unknown_lines == 0

    def test_iter_events_is_lazy(self, linux_sigsegv_lines):
        events = DocumentAssembler().iter_events(iter(linux_sigsegv_lines))

        assert isinstance(events, types.GeneratorType)
        first = next(events)
        assert first.kind is EventKind.HEADER
        assert first.index == 0

    def test_linux_log_has_no_unknown_lines(self, linux_sigsegv_lines):
        document = parse_document(linux_sigsegv_lines)
        assert document.unknown_events() == []

    def test_sections_are_recognised(self, linux_sigsegv_lines):
        document = parse_document(linux_sigsegv_lines)
        kinds = {event.kind for event in document.events}

        for kind in (EventKind.REGISTERS, EventKind.STACK, EventKind.HEAP, EventKind.DYNAMIC_LIBRARIES,
                     EventKind.SIGNAL_HANDLERS, EventKind.VM_ARGUMENTS, EventKind.DEOPTIMIZATION_EVENTS,
                     EventKind.DLL_OPERATION_EVENTS, EventKind.MEMINFO, EventKind.END):
            assert kind in kinds

    def test_no_events_row_belongs_to_ring_section(self, linux_sigsegv_lines):
        document = parse_document(linux_sigsegv_lines)
        row = document.events[linux_sigsegv_lines.index("No events")]

        assert row.kind is EventKind.DEOPTIMIZATION_EVENTS
        assert row.role is Role.BODY
        assert row.fields == {"no_events": True}


# =============================================================================
# Grammar defects
# =============================================================================

class TestGrammarDefects:
    """Tests for lenient and strict handling of builder rejections."""

    LINES = ["Registers:", "not a register line", "RAX=0x01"]

    def test_lenient_mode_degrades_to_unknown(self, test_logger, caplog):
        assembler = DocumentAssembler(ParserConfig(), classifier=AlwaysRegisters(), logger=test_logger)

        with caplog.at_level(logging.WARNING, logger="jvmcrash_tests"):
            document = assembler.parse(self.LINES)

        assert len(document) == 3
        assert document.events[1].kind is EventKind.UNKNOWN
        assert document.events[1].index == 1
        assert document.events[2].kind is EventKind.REGISTERS
        assert assembler.defects == 1
        assert document.facts.unknown_lines == 1
        assert "Line 2" in caplog.text

    def test_strict_mode_raises(self, strict_parser_config, test_logger):
        assembler = DocumentAssembler(strict_parser_config, classifier=AlwaysRegisters(), logger=test_logger)

        with pytest.raises(GrammarDefectError) as exc_info:
            assembler.parse(self.LINES)
        assert exc_info.value.kind is EventKind.REGISTERS

    def test_defect_count_resets_between_documents(self, test_logger):
        assembler = DocumentAssembler(classifier=AlwaysRegisters(), logger=test_logger)
        assembler.parse(self.LINES)
        assembler.parse(["Registers:"])
        assert assembler.defects == 0


# =============================================================================
# Line hashes
# =============================================================================

class TestLineHashes:
    """Tests for the optional xxHash64 line digest."""

    def test_hashes_disabled_by_default(self, default_parser_config):
        document = DocumentAssembler(default_parser_config).parse(["Registers:"])
        assert document.events[0].line_hash is None

    def test_hash_of_raw_line(self, strict_parser_config, linux_sigsegv_lines):
        document = DocumentAssembler(strict_parser_config).parse(linux_sigsegv_lines)

        for event, line in zip(document.events, linux_sigsegv_lines):
            assert event.line_hash == xxhash.xxh64_hexdigest(line.encode("utf-8"))

    def test_identical_lines_share_hash(self, strict_parser_config):
        document = DocumentAssembler(strict_parser_config).parse(["", "Heap:", ""])
        assert document.events[0].line_hash == document.events[2].line_hash
        assert document.events[0].line_hash != document.events[1].line_hash


# =============================================================================
# Crash facts
# =============================================================================

class TestLinuxFacts:
    """Tests for facts of a Linux SIGSEGV crash."""

    @pytest.fixture
    def facts(self, linux_sigsegv_lines):
        return parse_document(linux_sigsegv_lines).facts

    def test_os(self, facts):
        assert facts.os.family is OsFamily.LINUX
        assert facts.os.vendor is OsVendor.REDHAT
        assert facts.os.version == "7.7"

    def test_runtime(self, facts):
        assert facts.arch is Arch.X86_64
        assert facts.java_release == "1.8.0_192-b12"
        assert facts.java_feature == 8

    def test_signal_comes_from_siginfo(self, facts):
        assert facts.signal.number is SignalNumber.SIGSEGV
        assert facts.signal.code is SignalCode.SEGV_MAPERR
        assert facts.signal.address == HexAddress(8)

    def test_process(self, facts):
        assert facts.pid == 52385
        assert facts.elapsed_seconds == Decimal("956")
        assert facts.crash_time == "Tue Aug 18 14:10:59 2020"
        assert facts.timezone == "UTC"
        assert facts.java_command == "com.example.Main --port 8080"
        assert facts.command_line_options is None

    def test_nothing_truncated(self, facts):
        assert facts.truncated_kinds == set()
        assert facts.unknown_lines == 0


class TestWindowsFacts:
    """Tests for facts of a Windows access violation."""

    @pytest.fixture
    def document(self, windows_access_violation_lines):
        return parse_document(windows_access_violation_lines)

    def test_signal(self, document):
        signal = document.facts.signal
        assert signal.number is SignalNumber.SIGSEGV
        assert signal.code is SignalCode.EXCEPTION_ACCESS_VIOLATION
        assert signal.platform == "windows"
        assert signal.access == "reading"
        assert signal.address == HexAddress(0x48)

    def test_runtime(self, document):
        facts = document.facts
        assert facts.pid == 4242
        assert facts.arch is Arch.X86_64
        assert facts.java_feature == 11

    def test_os(self, document):
        os = document.facts.os
        assert os.family is OsFamily.WINDOWS
        assert os.vendor is OsVendor.MICROSOFT
        assert os.version == "Server 2016"

    def test_memory_without_swap(self, document):
        header = document.events_of(EventKind.MEMORY)[0]
        assert header.role is Role.HEADER
        assert header.fields["swap"] is None

    def test_windows_module_row(self, document):
        rows = [event for event in document.events_of(EventKind.DYNAMIC_LIBRARIES) if event.role is Role.BODY]
        assert len(rows) == 1
        assert rows[0].fields["path"].endswith("java.exe")


class TestTruncatedFacts:
    """Tests for a report whose error reporting aborted."""

    @pytest.fixture
    def document(self, truncated_lines):
        return parse_document(truncated_lines)

    def test_sentinel_inside_memory_section(self, document):
        event = document.events[6]
        assert event.kind is EventKind.MEMORY
        assert event.role is Role.BODY
        assert event.truncated
        assert event.fields == {"step": "memory info", "id": 11}

    def test_sentinel_outside_any_section(self, document):
        event = document.events[8]
        assert event.kind is EventKind.REPORT_ABORTED
        assert event.truncated
        assert event.fields["step"] == "dynamic libraries"

    def test_facts(self, document):
        facts = document.facts
        assert facts.truncated_kinds == {EventKind.MEMORY, EventKind.REPORT_ABORTED}
        assert facts.unknown_lines == 1
        assert facts.signal.number is SignalNumber.SIGBUS
        assert facts.pid == 1008245

    def test_last_line_is_unknown(self, document):
        assert document.events[-1].kind is EventKind.UNKNOWN
        assert document.events[-1].role is Role.UNKNOWN
