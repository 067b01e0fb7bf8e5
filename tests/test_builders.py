"""
Tests for field extraction.

Tests cover:
- Builder table completeness
- Every grammar example builds without a defect
- Per-family field extraction (registers, memory, mapped files, frames, heap rows, flags)
- Grammar defects for lines a builder cannot accept
"""

import dataclasses
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from jvmcrash.assembler import parse_document
from jvmcrash.builders import BUILDERS, HEADER_SUBTYPES, build, split_command_line
from jvmcrash.events import Event, GrammarDefectError
from jvmcrash.grammar import GRAMMARS, HEADER_ORDER, SectionGrammar
from jvmcrash.kinds import EventKind, Role
from jvmcrash.normalizers import Arch, ByteSize, Device, HexAddress, SignalNumber


HEADER_EXAMPLES = [(grammar.kind, example) for grammar in HEADER_ORDER for example in grammar.examples]

BODY_EXAMPLES = [
    (grammar.kind, example)
    for grammar in GRAMMARS.values()
    if isinstance(grammar, SectionGrammar)
    for example in grammar.body_examples
]


def fields_of(kind, line):
    return build(kind, line).fields


# =============================================================================
# Builder table
# =============================================================================

class TestBuilderTable:
    """Tests for the kind-to-extractor mapping."""

    def test_every_kind_has_a_builder(self):
        assert set(BUILDERS) == set(EventKind)

    @pytest.mark.parametrize("kind,line", HEADER_EXAMPLES,
                             ids=[f"{kind.name}-{i}" for i, (kind, _) in enumerate(HEADER_EXAMPLES)])
    def test_header_examples_build(self, kind, line):
        event = build(kind, line)
        grammar = GRAMMARS[kind]
        expected = Role.HEADER if isinstance(grammar, SectionGrammar) else grammar.role

        assert event.kind is kind
        assert event.role is expected
        assert event.text == line

    @pytest.mark.parametrize("kind,line", BODY_EXAMPLES,
                             ids=[f"{kind.name}-{i}" for i, (kind, _) in enumerate(BODY_EXAMPLES)])
    def test_body_examples_build(self, kind, line):
        assert build(kind, line).role in (Role.BODY, Role.FOOTER)

    def test_unknown_has_no_fields(self):
        event = build(EventKind.UNKNOWN, "anything")
        assert event.role is Role.UNKNOWN
        assert event.fields == {}

    def test_header_subtype_examples(self):
        for regex, subtype, example in HEADER_SUBTYPES:
            assert fields_of(EventKind.HEADER, example)["subtype"] == subtype


# =============================================================================
# Registers
# =============================================================================

class TestRegisters:
    """Tests for register rows and their interior blank lines."""

    def test_register_block(self):
        document = parse_document([
            "Registers:",
            "RAX=0x0000000000000001, RBX=0x00007f67383dc748, RCX=0x0000000000000004, RDX=0x00007f69b031f898",
            "",
            "R8 =0x0000000000000005, R9 =0x0000000000000010",
        ])
        events = document.events

        assert [event.kind for event in events] == [EventKind.REGISTERS] * 4
        assert [event.role for event in events] == [Role.HEADER, Role.BODY, Role.BODY, Role.BODY]
        assert events[1].fields["registers"] == {
            "RAX": 1, "RBX": 0x00007f67383dc748, "RCX": 4, "RDX": 0x00007f69b031f898,
        }
        assert events[2].fields == {}
        assert events[3].fields["registers"] == {"R8": 5, "R9": 16}

    def test_lowercase_names_are_upper_cased(self):
        registers = fields_of(EventKind.REGISTERS, "pc =0x00003fff7a9ddba0  lr =0x00003fff7a9ddb54")["registers"]
        assert registers == {"PC": 0x00003fff7a9ddba0, "LR": 0x00003fff7a9ddb54}

    def test_xmm_row_keeps_both_halves(self):
        registers = fields_of(EventKind.REGISTERS, "XMM[0]=0x0f4800f87e8349d2 0x33f8468d49368d49")["registers"]
        assert registers == {"XMM[0]": (0x0f4800f87e8349d2, 0x33f8468d49368d49)}

    def test_xmm_row_serializes_as_list(self):
        event = build(EventKind.REGISTERS, "XMM[15]=0x0000000000000000 0x00000000000000ff")
        assert event.to_dict()["fields"]["registers"] == {"XMM[15]": [0, 0xff]}

    def test_register_mapping_row(self):
        fields = fields_of(EventKind.REGISTER_TO_MEMORY_MAPPING, "RDX=0x00007f69b031f898 is an oop")
        assert fields == {"text": "is an oop", "register": "RDX", "value": 0x00007f69b031f898}


# =============================================================================
# Command line
# =============================================================================

class TestCommandLine:
    """Tests for splitting launcher command lines."""

    def test_options_only(self):
        fields = fields_of(EventKind.COMMAND_LINE, "Command Line: -Xmx2048m -Xmx12G -Xms1G")
        assert fields == {"options": "-Xmx2048m -Xmx12G -Xms1G", "invocation": None}

    def test_empty(self):
        assert fields_of(EventKind.COMMAND_LINE, "Command Line:") == {"options": None, "invocation": None}

    def test_options_and_main_class(self):
        fields = fields_of(EventKind.COMMAND_LINE, "Command Line: -Xmx2048m TestCrash")
        assert fields == {"options": "-Xmx2048m", "invocation": "TestCrash"}

    def test_option_argument_stays_with_option(self):
        options, invocation = split_command_line("-cp a.jar:b.jar com.example.Main arg")
        assert options == "-cp a.jar:b.jar"
        assert invocation == "com.example.Main arg"

    def test_jar_ends_options(self):
        options, invocation = split_command_line("-Xmx1g -jar app.jar --port 8080")
        assert options == "-Xmx1g -jar"
        assert invocation == "app.jar --port 8080"

    def test_invocation_only(self):
        assert split_command_line("com.example.Main") == (None, "com.example.Main")

    def test_none(self):
        assert split_command_line(None) == (None, None)


# =============================================================================
# Memory
# =============================================================================

class TestMemory:
    """Tests for the Memory header and its rows."""

    def test_linux_header(self):
        fields = fields_of(EventKind.MEMORY,
                           "Memory: 4k page, physical 16058700k(1456096k free), swap 8097788k(7612768k free)")
        assert fields["page_size"] == ByteSize(4096)
        assert fields["physical"] == ByteSize.parse("16058700k")
        assert fields["physical_free"] == ByteSize.parse("1456096k")
        assert fields["swap"] == ByteSize.parse("8097788k")
        assert fields["swap_free"] == ByteSize.parse("7612768k")

    def test_absent_swap_is_none(self):
        fields = fields_of(EventKind.MEMORY, "Memory: 4k page, system-wide physical 16383M (5994M free)")
        assert fields["physical"] == ByteSize.parse("16383M")
        assert fields["swap"] is None
        assert fields["swap_free"] is None

    def test_page_file_row(self):
        fields = fields_of(EventKind.MEMORY, "TotalPageFile size 20479M (AvailPageFile size 7532M)")
        assert fields == {"page_file_total": ByteSize.parse("20479M"),
                          "page_file_available": ByteSize.parse("7532M")}

    def test_working_set_row(self):
        fields = fields_of(EventKind.MEMORY,
                           "current process WorkingSet (physical memory assigned to process): 2262M, peak: 2262M")
        assert fields["key"] == "current process WorkingSet"
        assert fields["size"] == fields["peak"] == ByteSize.parse("2262M")

    def test_meminfo_row(self):
        assert fields_of(EventKind.MEMINFO, "MemTotal:       65305448 kB") == {
            "key": "MemTotal", "value": ByteSize.parse("65305448 kB"),
        }
        assert fields_of(EventKind.MEMINFO, "HugePages_Total:       0") == {"key": "HugePages_Total", "value": 0}


# =============================================================================
# Mapped files
# =============================================================================

class TestDynamicLibraries:
    """Tests for /proc/<pid>/maps rows and Windows module rows."""

    def test_maps_row(self):
        fields = fields_of(EventKind.DYNAMIC_LIBRARIES,
                           "00400000-00401000 r-xp 00000000 fd:0d 201327127                          "
                           "/path/to/jdk/bin/java")
        assert fields["range"] == (HexAddress(0x400000), HexAddress(0x401000))
        assert fields["permission"] == "r-xp"
        assert fields["offset"] == 0
        assert fields["device"] == "fd:0d"
        assert fields["inode"] == 201327127
        assert fields["path"] == "/path/to/jdk/bin/java"
        assert fields["storage"] is Device.FIXED_DISK

    def test_anonymous_mapping(self):
        fields = fields_of(EventKind.DYNAMIC_LIBRARIES,
                           "7ffd5c3d5000-7ffd5c3f6000 rw-p 00000000 00:00 0                          [stack]")
        assert fields["path"] == "[stack]"
        assert fields["storage"] is Device.UNKNOWN

    def test_nfs_mapping(self):
        fields = fields_of(EventKind.DYNAMIC_LIBRARIES,
                           "7f0a3c000000-7f0a3c021000 r--s 00000000 00:2f 1234567                    /nfs/lib.jar")
        assert fields["storage"] is Device.NFS

    def test_windows_row(self):
        fields = fields_of(EventKind.DYNAMIC_LIBRARIES,
                           "0x00007ff6dd430000 - 0x00007ff6dd477000 \tC:\\Program Files\\Java\\jdk-11\\bin\\java.exe")
        assert fields["range"] == (HexAddress(0x00007ff6dd430000), HexAddress(0x00007ff6dd477000))
        assert fields["path"] == "C:\\Program Files\\Java\\jdk-11\\bin\\java.exe"
        assert fields["permission"] is None
        assert fields["storage"] is Device.UNKNOWN

    def test_footer(self):
        event = build(EventKind.DYNAMIC_LIBRARIES, "Total number of mappings: 1234")
        assert event.role is Role.FOOTER
        assert event.fields == {"mappings": 1234}


# =============================================================================
# Signals and handlers
# =============================================================================

class TestSignalRows:
    """Tests for siginfo and signal handler rows."""

    def test_siginfo(self):
        signal = fields_of(EventKind.SIGINFO,
                           "siginfo: si_signo: 11 (SIGSEGV), si_code: 1 (SEGV_MAPERR), "
                           "si_addr: 0x0000000000000008")["signal"]
        assert signal.number is SignalNumber.SIGSEGV
        assert signal.address == HexAddress(8)

    def test_handler_flags(self):
        fields = fields_of(EventKind.SIGNAL_HANDLERS,
                           "SIGSEGV: [libjvm.so+0xb73090], sa_mask[0]=11111111011111111101111111111110, "
                           "sa_flags=SA_RESTART|SA_SIGINFO")
        assert fields == {
            "signal": "SIGSEGV",
            "handler": "[libjvm.so+0xb73090]",
            "mask": "11111111011111111101111111111110",
            "flags": ["SA_RESTART", "SA_SIGINFO"],
        }

    def test_handler_without_flags(self):
        fields = fields_of(EventKind.SIGNAL_HANDLERS,
                           "SIGPIPE: SIG_IGN, sa_mask[0]=00000000000000000000000000000000, sa_flags=none")
        assert fields["handler"] == "SIG_IGN"
        assert fields["flags"] == []

    def test_handler_note(self):
        assert fields_of(EventKind.SIGNAL_HANDLERS, "  *** Handler was modified!") == {
            "note": "*** Handler was modified!",
        }


# =============================================================================
# Global flags
# =============================================================================

class TestGlobalFlags:
    """Tests for typed global flag values."""

    def test_integer_flag(self):
        fields = fields_of(EventKind.GLOBAL_FLAGS,
                           "     intx CICompilerCount                          = 4                                "
                           "         {product} {ergonomic}")
        assert fields == {"type": "intx", "name": "CICompilerCount", "value": 4,
                          "category": "product", "origin": "ergonomic"}

    def test_bool_flag(self):
        fields = fields_of(EventKind.GLOBAL_FLAGS,
                           "     bool UseG1GC                                  = true                             "
                           "         {product} {command line}")
        assert fields["value"] is True
        assert fields["origin"] == "command line"

    def test_string_flag(self):
        fields = fields_of(EventKind.GLOBAL_FLAGS,
                           "    ccstr ErrorFile                                = /tmp/path/to/eclipse_vm_crash_%p.log"
                           "            {product} {command line}")
        assert fields["value"] == "/tmp/path/to/eclipse_vm_crash_%p.log"

    def test_double_flag_without_origin(self):
        fields = fields_of(EventKind.GLOBAL_FLAGS, "   double CompileThresholdScaling = 1.000000 {product}")
        assert fields["value"] == Decimal("1.000000")
        assert fields["origin"] is None


# =============================================================================
# Banner lines
# =============================================================================

class TestHeaderSubtypes:
    """Tests for '#' banner line subtypes."""

    def test_banner_is_not_a_frame(self):
        fields = fields_of(EventKind.HEADER, "# A fatal error has been detected by the Java Runtime Environment:")
        assert fields["subtype"] == "banner"

    def test_signal(self):
        fields = fields_of(EventKind.HEADER,
                           "#  SIGSEGV (0xb) at pc=0x00007fcbd05a3b71, pid=52385, tid=0x00007fcbcc677700")
        assert fields["subtype"] == "signal"
        assert fields["signal"].number is SignalNumber.SIGSEGV
        assert fields["signal"].address == HexAddress(0x00007fcbd05a3b71)
        assert fields["pid"] == 52385
        assert fields["tid"] == "0x00007fcbcc677700"

    def test_windows_signal(self):
        fields = fields_of(EventKind.HEADER,
                           "#  EXCEPTION_ACCESS_VIOLATION (0xc0000005) at pc=0x000000006d8a3d1e, pid=4242, "
                           "tid=0x0000000000001a2c")
        assert fields["signal"].platform == "windows"
        assert fields["pid"] == 4242

    def test_internal_error(self):
        fields = fields_of(EventKind.HEADER, "#  Internal Error (ciEnv.hpp:172), pid=6570, tid=0x00007fe3d7dfd700")
        assert fields["subtype"] == "internal_error"
        assert fields["location"] == "ciEnv.hpp:172"
        assert fields["pid"] == 6570

    def test_native_oom(self):
        fields = fields_of(EventKind.HEADER,
                           "# Native memory allocation (mmap) failed to map 12288 bytes for committing reserved "
                           "memory.")
        assert fields["subtype"] == "native_oom"
        assert fields["requested"] == ByteSize(12288)

    def test_jre_version(self):
        fields = fields_of(EventKind.HEADER,
                           "# JRE version: Java(TM) SE Runtime Environment (8.0_192-b12) (build 1.8.0_192-b12)")
        assert fields["build"] == "1.8.0_192-b12"
        assert fields["feature"] == 8

    def test_problematic_frame(self):
        fields = fields_of(EventKind.HEADER, "# V  [libjvm.so+0x645b71]  oopDesc::size_given_klass(Klass*)+0x1")
        assert fields["subtype"] == "problematic_frame"
        assert fields["frame_type"] == "vm"
        assert fields["library"] == "libjvm.so"
        assert fields["offset"] == 0x645b71
        assert fields["symbol"] == "oopDesc::size_given_klass(Klass*)+0x1"

    def test_bare_hash(self):
        assert fields_of(EventKind.HEADER, "#") == {"subtype": "text", "text": None}

    def test_heading_title(self):
        assert fields_of(EventKind.HEADING, "---------------  T H R E A D  ---------------") == {"title": "THREAD"}
        assert fields_of(EventKind.HEADING, "-" * 70) == {"title": None}


# =============================================================================
# Stack frames
# =============================================================================

class TestStackFrames:
    """Tests for native, interpreted and compiled frames."""

    def test_native_frame(self):
        fields = fields_of(EventKind.STACK, "C  [libcairo.so.2+0x66e64]  cairo_region_num_rectangles+0x4")
        assert fields == {"frame_type": "native", "library": "libcairo.so.2", "offset": 0x66e64,
                          "symbol": "cairo_region_num_rectangles+0x4"}

    def test_interpreted_frame(self):
        fields = fields_of(EventKind.STACK, "j  java.lang.Thread.run()V+11")
        assert fields["frame_type"] == "interpreted"
        assert fields["library"] is None
        assert fields["symbol"] == "java.lang.Thread.run()V+11"

    def test_compiled_frame(self):
        fields = fields_of(EventKind.STACK,
                           "J 1234 c2 java.lang.String.hashCode()I java.base (55 bytes) @ 0x00007f0a3c9b5e3c "
                           "[0x00007f0a3c9b5dc0+0x000000000000007c]")
        assert fields["frame_type"] == "compiled"
        assert fields["compile_id"] == 1234
        assert fields["compiler"] == "c2"
        assert fields["symbol"] == "java.lang.String.hashCode()I"

    def test_stub_frame(self):
        fields = fields_of(EventKind.STACK, "v  ~StubRoutines::call_stub")
        assert fields["frame_type"] == "vm_generated"
        assert fields["symbol"] == "~StubRoutines::call_stub"

    def test_more_frames_marker(self):
        assert fields_of(EventKind.STACK, "...<more frames>...") == {"marker": "more_frames"}

    def test_stack_bounds(self):
        fields = fields_of(EventKind.STACK,
                           "Stack: [0x00007fe1bc2b9000,0x00007fe1bc3b9000],  sp=0x00007fe1bc3b7bd0,  "
                           "free space=1018k")
        assert fields["range"] == (HexAddress(0x00007fe1bc2b9000), HexAddress(0x00007fe1bc3b9000))
        assert fields["sp"] == HexAddress(0x00007fe1bc3b7bd0)
        assert fields["free"] == ByteSize.parse("1018K")


# =============================================================================
# Heap rows
# =============================================================================

class TestHeapRows:
    """Tests for Heap section rows."""

    def test_generation_row(self):
        fields = fields_of(EventKind.HEAP,
                           " PSYoungGen      total 244736K, used 103751K [0x00000000eab00000, 0x0000000100000000, "
                           "0x0000000100000000)")
        assert fields["generation"] == "PSYoungGen"
        assert fields["total"] == ByteSize.parse("244736K")
        assert fields["used"] == ByteSize.parse("103751K")
        assert fields["committed"] is None
        assert fields["addresses"] == (HexAddress(0xeab00000), HexAddress(0x100000000), HexAddress(0x100000000))

    def test_space_row(self):
        fields = fields_of(EventKind.HEAP,
                           "  eden space 141312K, 24% used [0x00000000eab00000,0x00000000ecc7aef8,"
                           "0x00000000f3500000)")
        assert fields["space"] == "eden"
        assert fields["capacity"] == ByteSize.parse("141312K")
        assert fields["percent"] == 24
        assert len(fields["addresses"]) == 3

    def test_metaspace_row(self):
        fields = fields_of(EventKind.HEAP,
                           " Metaspace       used 139716K, capacity 155778K, committed 155992K, reserved 1183744K")
        assert fields["generation"] == "Metaspace"
        assert fields["capacity"] == ByteSize.parse("155778K")
        assert fields["reserved"] == ByteSize.parse("1183744K")
        assert "addresses" not in fields

    def test_gc_history_block_header(self):
        fields = fields_of(EventKind.GC_HEAP_HISTORY, "{Heap before GC invocations=1 (full 0):")
        assert fields == {"when": "before", "invocations": 1, "full": 0}

    def test_serial_and_cms_padded_rows(self):
        document = parse_document([
            "Heap:",
            "  par new generation   total 947392K, used 396580K [0x00000006c0000000, 0x0000000700000000, "
            "0x0000000700000000)",
            "   eden space 812096K,  46% used [0x00000006c0000000, 0x00000006e8c40a10, 0x00000006f1900000)",
            "   from space 135296K,  11% used [0x00000006f1900000, 0x00000006f2dc4898, 0x00000006f9c00000)",
            "   to   space 135296K,   0% used [0x00000006f9c00000, 0x00000006f9c00000, 0x0000000702000000)",
            "  tenured generation   total 2165440K, used 937560K [0x0000000700000000, 0x0000000784200000, "
            "0x0000000800000000)",
            "    the space 2165440K,  43% used [0x0000000700000000, 0x0000000739ff6208, 0x0000000784200000)",
        ])
        rows = document.events[1:]

        assert all(event.kind is EventKind.HEAP for event in document.events)
        assert all(event.role is Role.BODY for event in rows)
        assert [row.fields.get("generation") for row in rows] == [
            "par new generation", None, None, None, "tenured generation", None,
        ]
        assert [row.fields.get("space") for row in rows] == [None, "eden", "from", "to", None, "the"]
        assert [row.fields.get("percent") for row in rows] == [None, 46, 11, 0, None, 43]
        assert rows[3].fields["capacity"] == ByteSize.parse("135296K")
        assert len(rows[5].fields["addresses"]) == 3
        assert document.facts.unknown_lines == 0


# =============================================================================
# Heap regions
# =============================================================================

class TestHeapRegions:
    """Tests for G1 and Shenandoah region tables."""

    SHENANDOAH_ROW = ("AC   0   R     0x00000000e0000000  TAMS 0x00000000e0000000  UWM 0x00000000e0400000  "
                      "U  4096K|T     0B|G  4096K|S     0B|L     0B|CP   0")

    def test_shenandoah_rows_stay_in_section(self):
        document = parse_document([
            "Heap Regions:",
            "EU=empty-uncommitted, EC=empty-committed, R=regular, H=humongous start, HC=humongous continuation, "
            "CS=collection set, T=trash, P=pinned",
            self.SHENANDOAH_ROW,
            "R    1   R     0x00000000e0400000  TAMS 0x00000000e0400000  UWM 0x00000000e0800000  "
            "U  4096K|T     0B|G  4096K|S     0B|L     0B|CP   0",
        ])

        assert [event.kind for event in document.events] == [EventKind.HEAP_REGIONS] * 4
        assert [event.role for event in document.events] == [Role.HEADER, Role.BODY, Role.BODY, Role.BODY]
        assert document.events[2].fields["row"] == self.SHENANDOAH_ROW
        assert document.facts.unknown_lines == 0

    def test_g1_row(self):
        line = "|    0|CS |BTE    67a200000,    67a400000,    67a400000|TAMS    67a400000|CP   0"
        assert fields_of(EventKind.HEAP_REGIONS, line)["row"] == line


# =============================================================================
# Standalone facts
# =============================================================================

class TestStandaloneFacts:
    """Tests for single-line facts."""

    def test_vm_info_with_vendor_build(self):
        fields = fields_of(EventKind.VM_INFO,
                           'vm_info: OpenJDK 64-Bit Server VM (25.252-b14) for linux-amd64 JRE '
                           '(Zulu 8.46.0.52-SA-linux64) (1.8.0_252-b14), built on Apr 22 2020 07:39:02 by '
                           '"zulu_re" with gcc 4.4.7 20120313')
        assert fields["arch"] is Arch.X86_64
        assert fields["release"] == "1.8.0_252-b14"
        assert fields["feature"] == 8
        assert fields["vendor_builds"] == ["Zulu 8.46.0.52-SA-linux64"]
        assert fields["builder"] == "zulu_re"

    def test_elapsed_time(self):
        fields = fields_of(EventKind.ELAPSED_TIME, "elapsed time: 0.606413 seconds (0d 0h 0m 0s)")
        assert fields["seconds"] == Decimal("0.606413")
        assert fields_of(EventKind.ELAPSED_TIME, "elapsed time: 228058 seconds")["breakdown"] is None

    def test_heap_address(self):
        fields = fields_of(EventKind.HEAP_ADDRESS,
                           "heap address: 0x00000003c0000000, size: 16384 MB, Compressed Oops mode: Zero based, "
                           "Oop shift amount: 3")
        assert fields == {
            "address": HexAddress(0x3c0000000),
            "size": ByteSize.parse("16384M"),
            "compressed_oops_mode": "Zero based",
            "oop_shift": 3,
        }

    def test_os_uptime(self):
        assert fields_of(EventKind.OS_UPTIME, "OS uptime: 3 days 8:33 hours")["seconds"] == ((3 * 24 + 8) * 60 + 33) * 60

    def test_jvmti_agents_none(self):
        assert fields_of(EventKind.JVMTI_AGENTS, "JVMTI agents: none") == {"agents": []}

    def test_report_aborted(self):
        event = build(EventKind.REPORT_ABORTED,
                      "[error occurred during error reporting (printing memory info), id 0xb]")
        assert event.truncated
        assert event.role is Role.STANDALONE
        assert event.fields == {"step": "memory info", "id": 11}

    def test_sentinel_inside_section(self):
        event = build(EventKind.MEMORY, "[error occurred during error reporting (printing memory info), id 0xb]")
        assert event.truncated
        assert event.role is Role.BODY
        assert event.kind is EventKind.MEMORY


# =============================================================================
# Code cache
# =============================================================================

class TestCodeCache:
    """Tests for code heap summary lines."""

    def test_kilobyte_sizes(self):
        fields = fields_of(EventKind.CODE_CACHE, "CodeCache: size=245760Kb used=37495Kb max_used=37495Kb free=208264Kb")
        assert fields["heap"] == "CodeCache"
        assert fields["size"] == ByteSize.parse("245760K")
        assert fields["max_used"] == ByteSize.parse("37495K")

    @pytest.mark.parametrize("unit", ["G", "Gb", "GB"])
    def test_gigabyte_sizes(self, unit):
        fields = fields_of(EventKind.CODE_CACHE,
                           f"CodeHeap 'non-nmethods': size=2{unit} used=1{unit} max_used=1{unit} free=1{unit}")
        assert fields["heap"] == "CodeHeap 'non-nmethods'"
        assert fields["size"] == ByteSize(2 * 1024 ** 3)
        assert fields["free"] == ByteSize(1024 ** 3)

    def test_unitless_size_is_bytes(self):
        assert fields_of(EventKind.CODE_CACHE, "CodeCache: size=4096")["size"] == ByteSize(4096)


# =============================================================================
# Event records
# =============================================================================

class TestEventFields:
    """Tests for the read-only fields of built events."""

    def test_fields_cannot_be_assigned(self):
        event = build(EventKind.REGISTERS, "RAX=0x01, RBX=0x02")
        with pytest.raises(TypeError):
            event.fields["registers"] = {}

    def test_fields_copy_the_source_mapping(self):
        source = {"value": 1}
        event = Event(EventKind.PID_MAX, "1", Role.STANDALONE, source)
        source["value"] = 2
        assert event.fields == {"value": 1}

    def test_replace_keeps_fields_read_only(self):
        event = dataclasses.replace(build(EventKind.REGISTERS, "RAX=0x01"), index=7)
        assert event.fields == {"registers": {"RAX": 1}}
        with pytest.raises(TypeError):
            event.fields["extra"] = True


# =============================================================================
# Grammar defects
# =============================================================================

class TestGrammarDefects:
    """Tests for lines a builder cannot accept."""

    def test_section_line_matching_no_row(self):
        with pytest.raises(GrammarDefectError) as exc_info:
            build(EventKind.REGISTERS, "not a register line")
        assert exc_info.value.kind is EventKind.REGISTERS
        assert exc_info.value.line == "not a register line"

    def test_report_aborted_without_sentinel(self):
        with pytest.raises(GrammarDefectError):
            build(EventKind.REPORT_ABORTED, "foo")

    def test_standalone_line_matching_nothing(self):
        with pytest.raises(GrammarDefectError):
            build(EventKind.TIMEZONE, "not a timezone")

    def test_extractor_failure_is_wrapped(self):
        with pytest.raises(GrammarDefectError) as exc_info:
            build(EventKind.CODE_CACHE, " bounds [0x00007fa287170000, 0x00007fa289650000]")
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_defect_is_a_value_error(self):
        assert issubclass(GrammarDefectError, ValueError)
