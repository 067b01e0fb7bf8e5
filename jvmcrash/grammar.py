#!python3
"""
Line grammars for every event kind.

A SectionGrammar describes a multi-line sub-report: the header lines that open
it, the body rows that continue it, an optional footer that closes it, and
whether blank lines or curly braces may appear inside it. A StandaloneGrammar
describes a single self-contained line (including throwaway noise).

Patterns carry named groups; the builders read those groups directly, so a
line accepted by a grammar always yields its fields.

HEADER_ORDER is the audited, most-specific-first order in which header and
standalone grammars are tried for a line that does not continue the open
section.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple, Union

from .kinds import EventKind, Role, RING_BUFFER_KINDS, SPECIAL_KINDS, THROWAWAY_KINDS
from .patterns import (
    ADDRESS,
    BLANK_LINE,
    DEVICE_IDS,
    FILE_OFFSET,
    HEX,
    INODE,
    MEMORY_REGION,
    NO_EVENTS,
    PERMISSION,
    SIZE,
    SIZE2,
    TIMESTAMP,
)


def _re(*parts: str) -> Pattern:
    return re.compile("".join(parts))


# =========================================================================
# Grammar records
# =========================================================================

@dataclass(frozen=True)
class SectionGrammar:
    """Header, body and footer grammar of one sub-report."""

    kind: EventKind
    headers: Tuple[Pattern, ...]
    body: Tuple[Pattern, ...] = ()
    footer: Optional[Pattern] = None
    # Interior blank lines continue the section instead of closing it
    allows_blank: bool = False
    # Curly braces nest; a lone "}" continues the section while depth > 0
    braces: bool = False
    examples: Tuple[str, ...] = ()
    body_examples: Tuple[str, ...] = ()

    def match_header(self, line: str) -> Optional[re.Match]:
        for pattern in self.headers:
            match = pattern.match(line)
            if match:
                return match
        return None

    def match_footer(self, line: str) -> Optional[re.Match]:
        return self.footer.match(line) if self.footer else None

    def match_body(self, line: str) -> Optional[re.Match]:
        for pattern in self.body:
            match = pattern.match(line)
            if match:
                return match
        return None

    def is_header(self, line: str) -> bool:
        return self.match_header(line) is not None

    def is_footer(self, line: str) -> bool:
        return self.match_footer(line) is not None

    def is_body(self, line: str) -> bool:
        return self.match_body(line) is not None

    def continues(self, line: str, depth: int = 0) -> bool:
        """True when ``line`` belongs to this section while it is open."""
        if self.is_footer(line) or self.is_body(line):
            return True
        if self.allows_blank and BLANK_LINE.match(line):
            return True
        return self.braces and depth > 0 and line.strip() == "}"

    @property
    def opens_section(self) -> bool:
        return True


@dataclass(frozen=True)
class StandaloneGrammar:
    """A single-line fact or a throwaway line."""

    kind: EventKind
    pattern: Pattern
    role: Role = Role.STANDALONE
    examples: Tuple[str, ...] = ()

    def match_header(self, line: str) -> Optional[re.Match]:
        return self.pattern.match(line)

    def is_header(self, line: str) -> bool:
        return self.pattern.match(line) is not None

    @property
    def opens_section(self) -> bool:
        return False


Grammar = Union[SectionGrammar, StandaloneGrammar]


# =========================================================================
# Shared row grammars
# =========================================================================

# One canonical grammar for every timestamped ring buffer row
RING_ROW = _re(
    r"^Event: (?P<timestamp>", TIMESTAMP, r") (?:Thread (?P<thread>", ADDRESS, r")\s+)?(?P<message>.*?)\s*$"
)
NO_EVENTS_ROW = _re(r"^(?P<no_events>", NO_EVENTS, r")\s*$")

_GEN = r"(?P<generation>[A-Za-z][\w \-]*?)"

# Heap rows shared by the Heap section and GC heap history blocks
HEAP_ROWS = (
    _re(r"^\{?Heap (?P<when>before|after) GC invocations=(?P<invocations>\d+) \(full (?P<full>\d+)\):\s*$"),
    _re(r"^\s{1,2}", _GEN, r"\s+total(?: reserved)? (?P<total>", SIZE, r"),(?: committed (?P<committed>", SIZE,
        r"),)? used (?P<used>", SIZE, r")(?P<rest>.*)$"),
    _re(r"^ (?P<generation>Metaspace|ZHeap|Z Heap)\s+used (?P<used>", SIZE, r")(?P<rest>,.*)?$"),
    _re(r"^\s{2,}(?P<generation>class space)\s+used (?P<used>", SIZE, r")(?P<rest>,.*)?$"),
    _re(r"^\s{2,}(?P<space>eden|from|to|object|the|lgrp \d+)\s+space (?P<capacity>", SIZE,
        r"),\s+(?P<percent>\d{1,3})% used(?P<rest>.*)$"),
    _re(r"^\s{2,}region size (?P<region_size>", SIZE, r")(?P<rest>,.*)?$"),
    _re(r"^(?P<generation>Shenandoah Heap|Collection set:|Reserved region:)\s*$"),
    _re(r"^ (?P<total>", SIZE, r") (?:max|total), (?:(?P<soft_max>", SIZE, r") soft max, )?(?P<committed>", SIZE,
        r") committed, (?P<used>", SIZE, r") used\s*$"),
    _re(r"^ (?P<regions>\d+) x (?P<region_size>", SIZE, r") regions\s*$"),
    _re(r"^ ?Status: (?P<status>.*)$"),
    _re(r"^ - (?:\[|map)(?P<rest>.*)$"),
)


def _ring(kind: EventKind, title: str, examples: Tuple[str, ...], body_examples: Tuple[str, ...],
          extra_body: Tuple[Pattern, ...] = (), braces: bool = False) -> SectionGrammar:
    header = _re(r"^", title, r" \((?P<declared>\d+) events\):\s*$")
    return SectionGrammar(
        kind=kind,
        headers=(header,),
        body=(RING_ROW, NO_EVENTS_ROW) + extra_body,
        braces=braces,
        examples=examples,
        body_examples=body_examples,
    )


# =========================================================================
# Ring buffer sections
# =========================================================================

RING_GRAMMARS = (
    _ring(EventKind.CLASSES_LOADED, "Classes loaded",
          ("Classes loaded (20 events):",),
          ("Event: 45985.049 Loading class com/example/MyClass", "No events")),
    _ring(EventKind.CLASSES_REDEFINED, "Classes redefined",
          ("Classes redefined (0 events):",),
          ("Event: 19.740 Thread 0x000055ae21eec800 redefined class name=org.jboss.modules.Main, count=1",)),
    _ring(EventKind.CLASSES_UNLOADED, "Classes unloaded",
          ("Classes unloaded (13 events):",),
          ("Event: 7.661 Thread 0x00007f282c2174f0 Unloading class 0x0000000801591000 "
           "'java/lang/invoke/LambdaForm$DMH+0x0000000801591000'",)),
    _ring(EventKind.COMPILATION_EVENTS, "Compilation events",
          ("Compilation events (250 events):",),
          ("Event: 6606.129 Thread 0x00007ff0ec201800 nmethod 21002 0x00007ff0e04fd110 code "
           "[0x00007ff0e04fd360, 0x00007ff0e04fe1d0]",
           "Event: 6606.129 Thread 0x00007ff0ec201800 20997   !   4       "
           "org.eclipse.emf.ecore.xmi.impl.StringSegment::add (297 bytes)")),
    _ring(EventKind.DEOPTIMIZATION_EVENTS, "Deoptimization events",
          ("Deoptimization events (250 events):",),
          ("Event: 5688.682 Thread 0x00007ff0ec053800 Uncommon trap: reason=unstable_if action=reinterpret "
           "pc=0x00007ff0dd93860c method=org.eclipse.swt.custom.StyledTextRenderer.disposeTextLayout"
           "(Lorg/eclipse/swt/graphics/TextLayout;)V @ 39",
           "No events")),
    _ring(EventKind.DLL_OPERATION_EVENTS, "Dll operation events",
          ("Dll operation events (18 events):",),
          ("Event: 0.001 Loaded shared library /usr/lib/jvm/java-17-openjdk/lib/libjava.so",)),
    _ring(EventKind.EVENTS, "Events",
          ("Events (250 events):",),
          ("Event: 6665.311 Executing VM operation: RevokeBias done",
           "Event: 6665.311 Thread 0x00007fefe944f000 Thread exited: 0x00007fefe944f000")),
    _ring(EventKind.GC_HEAP_HISTORY, "GC Heap History",
          ("GC Heap History (48 events):",),
          ("Event: 1.905 GC heap before",
           "{Heap before GC invocations=1 (full 0):",
           " PSYoungGen      total 153088K, used 116252K [0x00000000eab00000, 0x00000000f5580000, "
           "0x0000000100000000)",
           "  eden space 131584K, 88% used [0x00000000eab00000,0x00000000f1c87328,0x00000000f2b80000)",
           " Metaspace       used 19510K, capacity 21116K, committed 21248K, reserved 1069056K",
           "  class space    used 1971K, capacity 2479K, committed 2560K, reserved 1048576K"),
          extra_body=HEAP_ROWS, braces=True),
    _ring(EventKind.INTERNAL_EXCEPTIONS, "Internal exceptions",
          ("Internal exceptions (10 events):",),
          ("Event: 1787840.598 Thread 0x00000000e2291000 StackOverflowError at 0x0000000006f058c0",
           "thrown [/builddir/build/BUILD/hotspot/src/share/vm/runtime/sharedRuntime.cpp, line 609]"),
          extra_body=(_re(r"^\s*(?P<thrown>thrown.*)$"),)),
    _ring(EventKind.MEMORY_PROTECTIONS, "Memory protections",
          ("Memory protections (20 events):",),
          ("Event: 227.096 Protecting memory [0x00007f11466e8000,0x00007f11466ec000] with protection modes 0",)),
    _ring(EventKind.NMETHOD_FLUSHES, "Nmethod flushes",
          ("Nmethod flushes (20 events):",),
          ("Event: 39.992 Thread 0x00007f128cf57870 flushing  nmethod 0x00007f1235b2ae90",)),
    _ring(EventKind.VM_OPERATIONS, "VM Operations",
          ("VM Operations (0 events):",),
          ("No events", "Event: 2.076 Executing VM operation: ICBufferFull")),
    _ring(EventKind.ZGC_PHASE_SWITCH, "ZGC Phase Switch",
          ("ZGC Phase Switch (0 events):",),
          ("Event: 12.003 Thread 0x00007f3e1c03a000 Major Collection (Relocate)",)),
)


# =========================================================================
# Other sections
# =========================================================================

_KEY_COLON_VALUE = r"(?P<key>[A-Za-z][\w ()/\-\.]*?)\s*:\s?(?P<value>.*?)\s*$"

SECTION_GRAMMARS = (
    SectionGrammar(
        EventKind.ACTIVE_LOCALE,
        headers=(_re(r"^Active Locale:\s*$"),),
        body=(_re(r"^(?P<key>LC_(?:ALL|COLLATE|CTYPE|MESSAGES|MONETARY|NUMERIC|TIME))=(?P<value>.*)$"),),
        examples=("Active Locale:",),
        body_examples=("LC_ALL=C", "LC_CTYPE=en_US.UTF-8"),
    ),
    SectionGrammar(
        EventKind.CLASS_INFO,
        headers=(
            _re(r"^Compressed class space (?P<mode>size|mapped at): (?P<value>.*)$"),
            _re(r"^Narrow klass base: (?P<base>", HEX, r"), Narrow klass shift: (?P<shift>\d+)(?P<rest>.*)$"),
        ),
        body=(
            _re(r"^(?P<key>Encoding Range|Klass ID Range|Klass Range|Protection zone|Narrow klass pointer bits"
                r"|UseCompressedClassPointers)[: ] ?(?P<value>.*)$"),
        ),
        examples=(
            "Compressed class space mapped at: 0x0000000800c00000-0x0000000840c00000, reserved size: 1073741824",
            "Compressed class space size: 1073741824 Address: 0x00000007c0000000",
            "Narrow klass base: 0x00007f4fcb000000, Narrow klass shift: 0, Narrow klass range: 0x100000000",
        ),
        body_examples=("UseCompressedClassPointers 1, UseCompactObjectHeaders 0",
                       "Narrow klass pointer bits 32, Max shift 3"),
    ),
    SectionGrammar(
        EventKind.CODE_CACHE,
        headers=(_re(r"^(?P<heap>CodeCache|CodeHeap '[^']+'):\s*(?P<value>.*)$"),),
        body=(
            _re(r"^ bounds (?P<bounds>\[.*\])\s*$"),
            _re(r"^ (?P<key>total_blobs|compilation|full_count)[=:]\s?(?P<value>.*)$"),
            _re(r"^\s+(?P<key>stopped_count)=(?P<value>.*)$"),
        ),
        examples=("CodeCache: size=245760Kb used=37495Kb max_used=37495Kb free=208264Kb",
                  "CodeHeap 'non-profiled nmethods': size=120032Kb used=5236Kb max_used=5236Kb free=114795Kb"),
        body_examples=(" bounds [0x00007fa287170000, 0x00007fa289650000, 0x00007fa296170000]",
                       " total_blobs=10468 nmethods=9889 adapters=493",
                       " compilation: enabled",
                       "              stopped_count=0, restarted_count=0"),
    ),
    SectionGrammar(
        EventKind.COMPILED_METHOD,
        headers=(_re(r"^Compiled method \((?P<compiler>[^)]+)\)\s+(?P<rest>.*)$"),),
        body=(
            _re(r"^ (?P<key>dependencies|handler table|main code|metadata|nul chk table|oops|relocation|"
                r"scopes data|scopes pcs|stub code|total in heap|consts|immutable data|mutable data|constants)"
                r"\s+\[(?P<start>", HEX, r"),\s?(?P<end>", HEX, r")\]\s+=\s+(?P<size>\d+)\s*$"),
        ),
        examples=("Compiled method (c2)  377611 18632       4       "
                  "org.jruby.runtime.callsite.CachingCallSite::cacheAndCall (70 bytes)",),
        body_examples=(" total in heap  [0x00007fab24f57210,0x00007fab24f57770] = 1376",
                       " scopes data    [0x00007fab24f57598,0x00007fab24f57638] = 160"),
    ),
    SectionGrammar(
        EventKind.CONTAINER_INFO,
        headers=(_re(r"^container \(cgroup\) information:\s*$"),),
        body=(
            _re(r"^(?P<key>active_processor_count|container_type|cpu_[a-z_]+|current number of tasks|"
                r"maximum number of tasks|kernel_memory_[a-z_]+|memory_[a-z_]+|rss_usage_in_bytes|"
                r"cache_usage_in_bytes):\s?(?P<value>.*?)\s*$"),
        ),
        examples=("container (cgroup) information:",),
        body_examples=("container_type: cgroupv1", "cpu_cpuset_cpus: 0-7",
                       "memory_usage_in_bytes: 3469758464", "memory_limit_in_bytes: unlimited"),
    ),
    SectionGrammar(
        EventKind.CPU_INFO,
        headers=(
            _re(r"^CPU:\s?total (?P<total>\d+)(?: \(initial active (?P<active>\d+)\))?"
                r"(?: \((?P<cores>\d+) cores per cpu, (?P<threads>\d+) threads per core\))?(?P<features>.*)$"),
            _re(r"^Online cpus:\s?(?P<value>.*)$"),
            _re(r"^(?P<key>/proc/cpuinfo|CPU Model and flags from /proc/cpuinfo):\s*$"),
        ),
        body=(
            _re(r"^(?!Online cpus:|CPU Model and flags)", _KEY_COLON_VALUE),
            _re(r"^(?P<value><Not Available>|\d+(?:-\d+)?|\d{1,10}(?:[\.,]\d)?[bBkKmMgG]|\d{1,2}KFrequency|"
                r"Data|Instruction|Unified|performance|powersave|performance powersave|ondemand)\s*$"),
        ),
        examples=("CPU:total 160 (initial active 160) ppc64 fsqrt isel lxarxeh cmpb popcntb popcntw",
                  "CPU: total 8 (initial active 8) (8 cores per cpu, 1 threads per core) family 6 model 158 "
                  "stepping 13 microcode 0xf0, cx8, cmov, fxsr, mmx",
                  "Online cpus: 0-7", "/proc/cpuinfo:"),
        body_examples=("processor       : 0", "cpu             : POWER9 (architected)",
                       "model name\t: Intel(R) Xeon(R) CPU E5-2680 v4 @ 2.40GHz", "32K"),
    ),
    SectionGrammar(
        EventKind.CURRENT_COMPILE_TASK,
        headers=(_re(r"^Current CompileTask:\s*$"),),
        body=(_re(r"^(?P<compiler>C[12]|JVMCI):\s*(?P<timestamp>\d+)\s+(?P<id>\d+)\s+(?P<rest>.*)$"),),
        examples=("Current CompileTask:",),
        body_examples=("C2:   1092  423       4       java.util.HashMap$KeyIterator::next (8 bytes)",
                       "C2:   1360 2202 % !   4       org.jboss.modules.Module::addExportedPaths @ 1224 (1429 bytes)"),
    ),
    SectionGrammar(
        EventKind.DYNAMIC_LIBRARIES,
        headers=(_re(r"^Dynamic libraries:\s*$"),),
        body=(
            # Windows rows first, the maps row would read " - 0x..." as a path
            _re(r"^(?P<start>", HEX, r") - (?P<end>", HEX, r")\s+(?P<path>.+?)\s*$"),
            _re(r"^(?P<region>", MEMORY_REGION, r"|", ADDRESS, r")(?: (?P<permission>", PERMISSION, r") (?P<offset>",
                FILE_OFFSET, r") (?P<device>", DEVICE_IDS, r") (?P<inode>", INODE, r"))?(?:[ \t]+(?P<path>.+?))?\s*$"),
            _re(r"^(?P<error>Can not get library information for pid = (?P<pid>\d+))\s*$"),
        ),
        footer=_re(r"^Total number of mappings: (?P<mappings>\d+)\s*$"),
        examples=("Dynamic libraries:",),
        body_examples=(
            "00400000-00401000 r-xp 00000000 fd:0d 201327127                          /path/to/jdk/bin/java",
            "0xffffffff49400000      /apps/java/jdk1.8.0_251_no_compiler/jre/lib/sparcv9/server/libjvm.so",
            "7ffd5c3d5000-7ffd5c3f6000 rw-p 00000000 00:00 0                          [stack]",
            "0x00007ff6dd430000 - 0x00007ff6dd477000 \tC:\\Program Files\\Java\\jdk1.8.0_251\\bin\\java.exe",
            "Total number of mappings: 1234",
        ),
    ),
    SectionGrammar(
        EventKind.ENVIRONMENT_VARIABLES,
        headers=(_re(r"^Environment Variables:\s*$"),),
        body=(_re(r"^(?P<key>[A-Za-z_][A-Za-z0-9_\.]*)=(?P<value>.*?)\s*$"),),
        examples=("Environment Variables:",),
        body_examples=("PATH=/path/to/bin", "LD_LIBRARY_PATH=:/path/to/lib ", "SHELL=/bin/ksh"),
    ),
    SectionGrammar(
        EventKind.EXCEPTION_COUNTS,
        headers=(_re(r"^OutOfMemory and StackOverflow Exception counts:\s*$"),),
        body=(_re(r"^(?P<key>StackOverflowErrors|OutOfMemoryError \w+|LinkageErrors)=(?P<value>\d+)\s*$"),),
        examples=("OutOfMemory and StackOverflow Exception counts:",),
        body_examples=("StackOverflowErrors=54", "OutOfMemoryError java_heap_errors=1"),
    ),
    SectionGrammar(
        EventKind.GC_PRECIOUS_LOG,
        headers=(_re(r"^GC Precious Log:\s*$"),),
        body=(
            _re(r"^ (?P<key>[A-Z][\w ()/\-]*?):\s*(?P<value>.*?)\s*$"),
            _re(r"^(?P<value><Empty>| \S.*)$"),
        ),
        examples=("GC Precious Log:",),
        body_examples=(" CPUs: 12 total, 12 available", " Memory: 31907M", " Heap Region Size: 4M", "<Empty>",
                       " String Deduplication"),
    ),
    SectionGrammar(
        EventKind.GLOBAL_FLAGS,
        headers=(_re(r"^\[Global flags\]\s*$"),),
        body=(
            _re(r"^\s*(?P<type>bool|ccstr|ccstrlist|double|intx|size_t|uint|uint64_t|uintx|int) (?P<name>\w+)\s+= ?"
                r"(?P<value>[^{]*?)\s*\{(?P<category>[^}]+)\}(?: \{(?P<origin>[^}]+)\})?\s*$"),
        ),
        examples=("[Global flags]",),
        body_examples=(
            "     intx CICompilerCount                          = 4                                         "
            "{product} {ergonomic}",
            "    ccstr ErrorFile                                = /tmp/path/to/eclipse_vm_crash_%p.log            "
            "{product} {command line}",
            "     bool UseG1GC                                  = true                                      "
            "{product} {command line}",
        ),
    ),
    SectionGrammar(
        EventKind.HEAP,
        headers=(_re(r"^Heap:\s*$"),),
        body=HEAP_ROWS,
        examples=("Heap:",),
        body_examples=(
            " PSYoungGen      total 244736K, used 103751K [0x00000000eab00000, 0x0000000100000000, "
            "0x0000000100000000)",
            "  eden space 141312K, 24% used [0x00000000eab00000,0x00000000ecc7aef8,0x00000000f3500000)",
            "    lgrp 0 space 262400K, 5% used [0x00000000d5580000,0x00000000d62cdd08,0x00000000e55c0000)",
            "  par new generation   total 947392K, used 396580K [0x00000006c0000000, 0x0000000700000000, "
            "0x0000000700000000)",
            "   to   space 135296K,   0% used [0x0000000703c00000, 0x0000000703c00000, 0x0000000708000000)",
            "    the space 2165440K,  43% used [0x0000000700000000, 0x0000000739ff6208, 0x0000000784200000)",
            " garbage-first heap   total 1933312K, used 1030565K [0x0000000500000000, 0x0000000800000000)",
            "  region size 1024K, 24 young (24576K), 0 survivors (0K)",
            " Metaspace       used 139716K, capacity 155778K, committed 155992K, reserved 1183744K",
            " ZHeap           used 3999154M, capacity 4710400M, max capacity 4710400M",
            "Shenandoah Heap",
        ),
    ),
    SectionGrammar(
        EventKind.HEAP_REGIONS,
        headers=(_re(r"^Heap Regions:\s?(?P<legend>.*)$"),),
        body=(
            _re(r"^(?P<row>\|.*)$"),
            # Shenandoah region rows
            _re(r"^(?P<row>(?:AC|EU|EC|R|H|HC|CS|TR|P|FREE)\s+\d+\s.*)$"),
            _re(r"^\s*(?P<legend>(?:AC|BTE|CP|HC|R|SN|EU|S|T|UWM|E|O|HS|CS|F)=.*)$"),
            _re(r"^(?P<legend>Region state:.*)$"),
        ),
        examples=("Heap Regions:",
                  "Heap Regions: E=young(eden), S=young(survivor), O=old, HS=humongous(starts), "
                  "HC=humongous(continues), CS=collection set, F=free"),
        body_examples=(
            "|    0|CS |BTE    67a200000,    67a400000,    67a400000|TAMS    67a400000|UWM    67a400000|U  2048K"
            "|T  2047K|G     0B|S    56B|L 31152B|CP   0",
            "AC   0   R     0x00000000e0000000  TAMS 0x00000000e0000000  UWM 0x00000000e0400000  "
            "U  4096K|T     0B|G  4096K|S     0B|L     0B|CP   0",
            "EU=empty-uncommitted, EC=empty-committed, R=regular, H=humongous start, HC=humongous continuation, "
            "CS=collection set, T=trash, P=pinned",
        ),
    ),
    SectionGrammar(
        EventKind.INSTRUCTIONS,
        headers=(_re(r"^Instructions: \(pc=(?P<pc>", HEX, r")\)\s*$"),),
        body=(_re(r"^(?P<address>", ADDRESS, r"):(?P<bytes>(?:\s+[0-9a-f?]+)*)\s*$"),),
        examples=("Instructions: (pc=0x00007fcbd05a3b71)",),
        body_examples=("0x00007fcbd05a3b51:   5d c3 0f 1f 44 00 00 48 8d 35 01 db 4c 00 bf 03",),
    ),
    SectionGrammar(
        EventKind.INTERNAL_STATISTICS,
        headers=(_re(r"^Internal statistics:\s*$"),),
        body=(_re(r"^(?P<key>num_\w+): (?P<value>\d+)\.?\s*$"),),
        allows_blank=True,
        examples=("Internal statistics:",),
        body_examples=("num_allocs_failed_limit: 0.", "num_arena_births: 4."),
    ),
    SectionGrammar(
        EventKind.LD_PRELOAD_FILE,
        headers=(_re(r"^/etc/ld\.so\.preload:\s*$"),),
        body=(_re(r"^(?P<path>/(?!proc/|sys/)\S.*?)\s*$"),),
        examples=("/etc/ld.so.preload:",),
        body_examples=("/$LIB/liboneagentproc.so",),
    ),
    SectionGrammar(
        EventKind.LOCK_STACK,
        headers=(_re(r"^Lock stack of current Java thread \(top to bottom\):\s*$"),),
        body=(_re(r"^LockStack\[(?P<position>\d+)\]: (?P<value>.+)$"),),
        examples=("Lock stack of current Java thread (top to bottom):",),
        body_examples=("LockStack[1]: com.example.MyClass",),
    ),
    SectionGrammar(
        EventKind.LOGGING,
        headers=(_re(r"^Logging:\s*$"),),
        body=(
            _re(r"^(?P<key>Log output configuration):\s*$"),
            _re(r"^\s+#(?P<output>\d+): (?P<value>.*)$"),
        ),
        examples=("Logging:",),
        body_examples=("Log output configuration:", " #0: stdout all=warning uptime,level,tags"),
    ),
    SectionGrammar(
        EventKind.MACH_CODE,
        headers=(_re(r"^\[MachCode\]\s*$"),),
        body=(_re(r"^(?P<code>.*)$"),),
        footer=_re(r"^\[/MachCode\]\s*$"),
        allows_blank=True,
        examples=("[MachCode]",),
        body_examples=("  0x00007ff4011cb4a0: 448b 5608 | 49bb 0000 | 0000 0800 | 0000 4d03",
                       "[Verified Entry Point]", "[/MachCode]"),
    ),
    SectionGrammar(
        EventKind.MARKING_BITS,
        headers=(_re(r"^(?P<name>Marking Bits(?: \(Prev, Next\))?|Mod Union Table): (?P<value>.*)$"),),
        body=(_re(r"^\s+(?P<which>(?:Begin|End|Prev|Next) )?Bits:\s+(?P<range>\[.*)$"),),
        examples=("Marking Bits: (CMSBitMap*) 0x00007fcbc8249ce8",
                  "Marking Bits (Prev, Next): (CMBitMap*) 0x00003fff74037098, (CMBitMap*) 0x00003fff740370f0",
                  "Mod Union Table: (CMSBitMap*) 0x00007fcbc8249da8"),
        body_examples=(" Begin Bits: [0x00007f45d8c22000, 0x00007f45d9422000)",
                       " Bits: [0x00007f677d83f000, 0x00007f6900a58c00)"),
    ),
    SectionGrammar(
        EventKind.MAX_MAP_COUNT,
        headers=(_re(r"^/proc/sys/vm/max_map_count \(maximum number of memory map areas a process may have\):"
                     r"(?: (?P<value>\d+))?\s*$"),),
        body=(_re(r"^(?P<value>\d+)\s*$"),),
        examples=("/proc/sys/vm/max_map_count (maximum number of memory map areas a process may have):",),
        body_examples=("65530",),
    ),
    SectionGrammar(
        EventKind.MEMINFO,
        headers=(_re(r"^/proc/meminfo:\s*$"),),
        body=(_re(r"^(?P<key>[A-Za-z][\w()]*):\s+(?P<value>\d+)(?: (?P<unit>kB))?\s*$"),),
        examples=("/proc/meminfo:",),
        body_examples=("MemTotal:       65305448 kB", "Active(anon):   24235196 kB", "HugePages_Total:       0"),
    ),
    SectionGrammar(
        EventKind.MEMORY,
        headers=(
            _re(r"^Memory: (?P<page>\d+)k page,(?: system-wide)? physical (?P<physical>", SIZE,
                r")\s?(?:\((?P<physical_free>", SIZE, r") free\))?(?:, swap (?P<swap>", SIZE,
                r")\s?(?:\((?P<swap_free>", SIZE, r") free\))?)?\s*$"),
        ),
        body=(
            _re(r"^(?P<key>current process (?:commit charge|WorkingSet)) \((?P<value>.*)\):?\s*(?P<rest>.*)$"),
            _re(r"^(?P<key>Page Sizes): (?P<value>.*)$"),
            _re(r"^TotalPageFile size (?P<total>\d+)M \(AvailPageFile size (?P<available>\d+)M\)\s*$"),
        ),
        examples=("Memory: 4k page, physical 16058700k(1456096k free), swap 8097788k(7612768k free)",
                  "Memory: 4k page, system-wide physical 16383M (5994M free)"),
        body_examples=("TotalPageFile size 20479M (AvailPageFile size 7532M)",
                       "current process WorkingSet (physical memory assigned to process): 2262M, peak: 2262M"),
    ),
    SectionGrammar(
        EventKind.METASPACE,
        headers=(_re(r"^Metaspace:\s*$"),),
        body=(
            _re(r"^(?P<key>Usage|Virtual space|Chunk freelists):\s*$"),
            _re(r"^(?P<key>No class space)\s*$"),
            _re(r"^(?P<key>CDS|MaxMetaspaceSize|CompressedClassSpaceSize|(?:Current|Initial) GC threshold|"
                r"MetaspaceReclaimPolicy): (?P<value>.*?)\s*$"),
            _re(r"^ - (?P<key>\w+): (?P<value>.*?)\s*$"),
            _re(r"^\s+(?P<key>BotD|Both|Class(?: space)?|Non-[cC]lass(?: space)?):\s+(?P<value>.*?)\s*$"),
            _re(r"^\s*(?P<value>", SIZE2, r".*?)\s*$"),
        ),
        allows_blank=True,
        examples=("Metaspace:",),
        body_examples=(
            "Usage:",
            "  Non-class:    136.84 MB capacity,   129.90 MB ( 95%) used,     6.64 MB (  5%) free+waste,   "
            "305.00 KB ( <1%) overhead.",
            "      Class space:        1.00 GB reserved,      17.95 MB (  2%) committed",
            "MaxMetaspaceSize: unlimited",
            " - commit_granule_bytes: 65536.",
        ),
    ),
    SectionGrammar(
        EventKind.NATIVE_MEMORY_TRACKING,
        headers=(_re(r"^Native Memory Tracking:\s*$"),),
        body=(
            _re(r"^(?P<category>Total): (?P<value>reserved=.*)$"),
            _re(r"^-\s+(?P<category>[\w ]+?) \((?P<value>reserved=.*)\)\s*$"),
            _re(r"^\s+\((?P<value>.*)\)\s*$"),
            _re(r"^\s+(?P<category>malloc|mmap): (?P<value>.*)$"),
            _re(r"^(?P<value>\(Omitting categories.*|MallocLimit:.*|pre-init mallocs:.*|Preinit state:.*)$"),
        ),
        allows_blank=True,
        examples=("Native Memory Tracking:",),
        body_examples=("Total: reserved=18369225KB, committed=17150661KB",
                       "-                 Java Heap (reserved=8388608KB, committed=8388608KB)",
                       "                            (mmap: reserved=8388608KB, committed=8388608KB)",
                       "                            (classes #32343)"),
    ),
    SectionGrammar(
        EventKind.OS,
        headers=(_re(r"^OS:\s*(?P<text>.*?)\s*$"),),
        body=(
            _re(r"^(?P<text>(?:CentOS|Oracle|Red Hat Enterprise|Rocky|AlmaLinux|SUSE|Ubuntu|Debian|Amazon|Alpine)"
                r"[^=]*?)\s*$"),
            _re(r"^\s*(?P<text>(?:Windows|Oracle Solaris|Copyright|Assembled)\s.*?)\s*$"),
            _re(r"^\s*(?P<key>[A-Z][A-Z_]*)=(?P<value>.*?)\s*$"),
            _re(r"^(?P<text># (?:Please check /etc/os-release|This file is deprecated).*)$"),
        ),
        examples=("OS:Red Hat Enterprise Linux Server release 7.7 (Maipo)",
                  "OS:                            Oracle Solaris 11.4 SPARC",
                  "OS: Windows Server 2016 , 64 bit Build 14393 (10.0.14393.3630)",
                  "OS:"),
        body_examples=("Red Hat Enterprise Linux release 8.5 (Ootpa)", 'NAME="Ubuntu"', 'VERSION_ID="20.04"'),
    ),
    SectionGrammar(
        EventKind.PID_MAX,
        headers=(_re(r"^/proc/sys/kernel/pid_max \(system-wide limit on number of process identifiers\):"
                     r"(?: (?P<value>\d+))?\s*$"),),
        body=(_re(r"^(?P<value>\d+)\s*$"),),
        examples=("/proc/sys/kernel/pid_max (system-wide limit on number of process identifiers):",),
        body_examples=("32768",),
    ),
    SectionGrammar(
        EventKind.PROCESS_MEMORY,
        headers=(_re(r"^Process Memory:\s*$"),),
        body=(_re(r"^(?P<key>Virtual Size|Resident Set Size|Swapped out|C-Heap outstanding allocations|"
                  r"C-Heap retained|glibc malloc tunables)(?::\s?|\s)(?P<value>.*?)\s*$"),),
        examples=("Process Memory:",),
        body_examples=("Virtual Size: 11384200K (peak: 19821176K)",
                       "Resident Set Size: 9169564K (peak: 9198848K) (anon: 9144372K, file: 25192K, shmem: 0K)",
                       "Swapped out: 0K"),
    ),
    SectionGrammar(
        EventKind.REGISTERS,
        headers=(_re(r"^Registers:\s*$"),),
        body=(_re(r"^\s*(?:[A-Za-z][A-Za-z0-9]{0,7}(?:\[\d+\])?\s*=\s*(?:0x)?[0-9a-fA-F]+"
                  r"(?: (?:0x)?[0-9a-fA-F]+)?[,\s]*)+$"),),
        allows_blank=True,
        examples=("Registers:",),
        body_examples=("RAX=0x0000000000000001, RBX=0x00007f67383dc748, RCX=0x0000000000000004, "
                       "RDX=0x00007f69b031f898",
                       "R8 =0x0000000000000005, R9 =0x0000000000000010, R10=0x0000000000000000",
                       "  TRAPNO=0x000000000000000e",
                       "pc =0x00003fff7a9ddba0  lr =0x00003fff7a9ddb54  ctr=0x000000000000000f",
                       "RAX=0x01, RBX=0x02"),
    ),
    SectionGrammar(
        EventKind.REGISTER_TO_MEMORY_MAPPING,
        headers=(_re(r"^Register to memory mapping:\s*$"),),
        body=(
            _re(r"^(?P<register>[A-Za-z][A-Za-z0-9]{0,6})\s*=\s*(?P<value>(?:0x)?[0-9a-fA-F]+)?\s*(?P<text>.*)$"),
            _re(r"^(?P<text>(?:\s*- .*|\{", ADDRESS, r"\} - klass:.*|\[[BCIJLSZ].*|BufferBlob.*|\[CodeBlob.*|"
                r"Framesize.*|Adapter for signature:.*|StubRoutines.*|method entry point.*|i?return.*|"
                r"exception handling.*|invoke return entry points.*|[a-z][\w$]*(?:\.[\w$]+)+.*|"
                r"0x[0-9a-f]+ is .*|\s+0x[0-9a-f]+.*))$"),
        ),
        allows_blank=True,
        examples=("Register to memory mapping:",),
        body_examples=("RAX=0x0000000000000001 is an unknown value",
                       "RDX=0x00007f69b031f898 is an oop",
                       "java.util.LinkedList$Node ",
                       " - klass: 'java/util/LinkedList$Node'"),
    ),
    SectionGrammar(
        EventKind.RELEASE_FILE,
        headers=(_re(r"^Release file:\s*$"),),
        body=(
            _re(r"^(?P<value><release file has not been read>)\s*$"),
            _re(r"^(?P<key>[A-Z][A-Z_]*)=\"?(?P<value>.*?)\"?\s*$"),
        ),
        examples=("Release file:",),
        body_examples=("<release file has not been read>", 'JAVA_VERSION="17.0.6"', 'OS_ARCH="x86_64"'),
    ),
    SectionGrammar(
        EventKind.SIGNAL_HANDLERS,
        headers=(_re(r"^Signal Handlers:\s*$"),),
        body=(
            _re(r"^\s{0,5}(?P<signal>SIG\w+): (?P<handler>[^,]*)(?:, (?:sa_mask\[0\]|mask)=(?P<mask>[01]+))?"
                r"(?:, (?:sa_flags|flags)=(?P<flags>\S+))?(?P<rest>.*)$"),
            _re(r"^\s{0,5}(?P<note>\*\*\* .*)$"),
        ),
        examples=("Signal Handlers:",),
        body_examples=("SIGSEGV: [libjvm.so+0xb73090], sa_mask[0]=11111111011111111101111111111110, "
                       "sa_flags=SA_RESTART|SA_SIGINFO",
                       "SIGPIPE: SIG_IGN, sa_mask[0]=00000000000000000000000000000000, sa_flags=none",
                       "  *** Handler was modified!"),
    ),
    SectionGrammar(
        EventKind.STACK,
        headers=(
            _re(r"^Stack: \[(?P<start>", ADDRESS, r"),(?P<end>", ADDRESS, r")\](?:,\s+sp=(?P<sp>", ADDRESS,
                r"),\s+free space=(?P<free>\d+)k)?\s*$"),
            _re(r"^(?P<frames>Java|Native) frames:\s*(?P<legend>.*)$"),
        ),
        body=(
            _re(r"^(?P<tag>[CjJAvV])\s{1,2}(?P<text>\S.*?)\s*$"),
            _re(r"^(?P<marker>\.\.\.<more frames>\.\.\.)\s*$"),
            _re(r"^(?P<marker>JavaThread) (?P<text>.*)$"),
        ),
        examples=("Stack: [0x00007fe1bc2b9000,0x00007fe1bc3b9000],  sp=0x00007fe1bc3b7bd0,  free space=1018k",
                  "Native frames: (J=compiled Java code, j=interpreted, Vv=VM code, C=native code)",
                  "Java frames: (J=compiled Java code, j=interpreted, Vv=VM code)"),
        body_examples=("V  [libjvm.so+0x65a9e1]  oopDesc::size_given_klass(Klass*)+0x1",
                       "C  [libcairo.so.2+0x66e64]  cairo_region_num_rectangles+0x4",
                       "j  java.lang.Thread.run()V+11",
                       "J 1234 c2 java.lang.String.hashCode()I java.base (55 bytes) @ 0x00007f0a3c9b5e3c "
                       "[0x00007f0a3c9b5dc0+0x000000000000007c]",
                       "v  ~StubRoutines::call_stub",
                       "...<more frames>..."),
    ),
    SectionGrammar(
        EventKind.STACK_SLOT_TO_MEMORY_MAPPING,
        headers=(_re(r"^Stack slot to memory mapping:\s*$"),),
        body=(
            _re(r"^stack at sp \+ (?P<slot>\d+) slots: (?P<value>(?:0x)?[0-9a-f]+):?\s*(?P<text>.*)$"),
            _re(r"^(?P<text>\[CodeBlob.*|method entry point.*|\{", ADDRESS, r"\} - klass:.*| - length:.*|"
                r"BufferBlob.*|Framesize:.*|[a-z][\w$]*(?:\.[\w$]+)+.*|\s+- .*)$"),
        ),
        examples=("Stack slot to memory mapping:",),
        body_examples=("stack at sp + 1 slots: 0x000000000000000a is an unknown value",
                       "stack at sp + 5 slots: 0x0 is NULL"),
    ),
    SectionGrammar(
        EventKind.THREADS,
        headers=(_re(r"^(?P<group>Java Threads: \( => current thread \)|Other Threads:)\s*$"),),
        body=(
            _re(r"^(?P<marker>  |=>)(?P<address>", HEX, r")(?P<exited> \(exited\))? (?P<type>\w+)"
                r"(?: \"(?P<name>[^\"]*)\")?(?P<rest>.*)$"),
            _re(r"^Total: (?P<total>\d+)\s*$"),
        ),
        examples=("Java Threads: ( => current thread )", "Other Threads:"),
        body_examples=('  0x00007f19aa5128e0 JavaThread "Thread-8" daemon [_thread_blocked, id=18881, '
                       'stack(0x00007f199cf04000,0x00007f199d005000)]',
                       '=>0x00007f127434f800 JavaThread "main" [_thread_in_native, id=112672, '
                       'stack(0x00007f11e11a2000,0x00007f11e12a3000)]',
                       '  0x00007fcbc8240000 VMThread "VM Thread" [stack: 0x00007fcb8c1a3000,0x00007fcb8c2a3000] '
                       '[id=52393]'),
    ),
    SectionGrammar(
        EventKind.THREADS_ACTIVE_COMPILE,
        headers=(_re(r"^Threads with active compile tasks:\s*$"),),
        body=(_re(r"^(?P<compiler>C[12]) CompilerThread(?P<thread>\d+)\s*(?P<rest>.*)$"),),
        examples=("Threads with active compile tasks:",),
        body_examples=("C2 CompilerThread0606385663 219105 %     4       "
                       "com.example.FieldService::toFieldDomainNamePart @ 56 (111 bytes)",),
    ),
    SectionGrammar(
        EventKind.THREADS_CLASS_SMR_INFO,
        headers=(_re(r"^Threads class SMR info:\s*$"),),
        body=(
            _re(r"^(?P<list>_(?:java_thread|to_delete)_list)=(?P<address>", HEX, r"), length=(?P<length>\d+)"
                r"(?P<rest>.*)$"),
            _re(r"^(?P<key>_\w+)[=:]? ?(?P<value>.*)$"),
            _re(r"^(?P<addresses>(?:", HEX, r", )*", HEX, r",?)\s*$"),
            _re(r"^(?P<addresses>(?:", HEX, r", )*(?:", HEX, r")?),? ?\}\s*$"),
            _re(r"^(?P<elided>\.\.\.)\s*$"),
        ),
        braces=True,
        examples=("Threads class SMR info:",),
        body_examples=("_java_thread_list=0x00000000020a0100, length=58, elements={",
                       "0x00007ffff0017800, 0x00007ffff0450000, 0x00007ffff0452000, 0x00007ffff0460000,",
                       "...",
                       "0x00007fff5d5c6000, 0x0000000001b2a000"),
    ),
    SectionGrammar(
        EventKind.THREADS_MAX,
        headers=(_re(r"^/proc/sys/kernel/threads-max \(system-wide limit on the number of threads\):"
                     r"(?: (?P<value>\d+))?\s*$"),),
        body=(_re(r"^(?P<value>\d+)\s*$"),),
        examples=("/proc/sys/kernel/threads-max (system-wide limit on the number of threads):",
                  "/proc/sys/kernel/threads-max (system-wide limit on the number of threads): 254790"),
        body_examples=("255838",),
    ),
    SectionGrammar(
        EventKind.TOP_OF_STACK,
        headers=(_re(r"^Top of Stack: \(sp=(?P<sp>", HEX, r")\)\s*$"),),
        body=(_re(r"^(?P<address>", ADDRESS, r"):\s+(?P<values>(?:[0-9a-f]{8,16}\s*)+)$"),),
        examples=("Top of Stack: (sp=0x00007fcbcc676c50)",),
        body_examples=("0x00007fcbcc676c50:   00007fcbcc676cb0 00007fcbd0596b86",),
    ),
    SectionGrammar(
        EventKind.TRANSPARENT_HUGEPAGE,
        headers=(_re(r"^/sys/kernel/mm/transparent_hugepage/(?P<setting>enabled|defrag|hpage_pmd_size|"
                     r"shmem_enabled)(?: \([^)]*\))?:(?: (?P<value>.+?))?\s*$"),),
        body=(
            _re(r"^(?P<value>(?:[\w+\-]+ )*\[[\w+\-]+\](?: [\w+\-]+)*)\s*$"),
            _re(r"^(?P<value>\d+)\s*$"),
        ),
        examples=("/sys/kernel/mm/transparent_hugepage/enabled:",
                  "/sys/kernel/mm/transparent_hugepage/defrag (defrag/compaction efforts parameter):",
                  "/sys/kernel/mm/transparent_hugepage/hpage_pmd_size: 2097152"),
        body_examples=("[always] madvise never", "always defer defer+madvise [madvise] never"),
    ),
    SectionGrammar(
        EventKind.UNAME,
        headers=(_re(r"^uname:\s?(?P<text>(?:Linux|SunOS|AIX|Darwin) .+?)\s*$"),),
        body=(_re(r"^\s+(?P<text>\(T2 libthread\))\s*$"),),
        examples=("uname:Linux 3.10.0-1127.19.1.el7.x86_64 #1 SMP Tue Aug 11 19:12:04 EDT 2020 x86_64",
                  "uname:SunOS 5.11 11.4.32.88.3 sun4v"),
        body_examples=("  (T2 libthread)",),
    ),
    SectionGrammar(
        EventKind.VIRTUALIZATION_INFO,
        headers=(_re(r"^(?P<text>(?P<hypervisor>Hyper-?V|KVM|VMWare|Xen|Docker|LPAR|zVM) virtualization detected|"
                     r"Steal ticks.*?)\s*$"),),
        body=(
            _re(r"^(?P<key>(?:guest\.mem|host\.cpu|ovhd\.mem|vm\.cpu|vm\.numa|vm\.mem)\.[\w.]+) = (?P<value>.*?)\s*$"),
            _re(r"^(?P<text>vSphere (?:host|resource) information.*:)\s*$"),
        ),
        examples=("VMWare virtualization detected", "KVM virtualization detected"),
        body_examples=("vSphere host information:", "host.cpu.processorMHz = 2593"),
    ),
    SectionGrammar(
        EventKind.VM_ARGUMENTS,
        headers=(_re(r"^VM Arguments:\s*$"),),
        body=(_re(r"^(?P<key>jvm_args|java_command|java_class_path \(initial\)|Launcher Type):\s?(?P<value>.*?)"
                  r"\s*$"),),
        examples=("VM Arguments:",),
        body_examples=("jvm_args: -Xms4014m -Xmx5734m -XX:+UseShenandoahGC",
                       "java_command: /path/to/jboss-modules.jar -Djboss.home.dir=/path/to/standalone",
                       "java_class_path (initial): /path/to/jboss-modules.jar",
                       "Launcher Type: SUN_STANDARD"),
    ),
    SectionGrammar(
        EventKind.VM_MUTEX,
        headers=(_re(r"^VM Mutex/Monitor currently owned by a thread:\s*(?P<text>.*?)\s*$"),),
        body=(_re(r"^\[(?P<address>", HEX, r")\] (?P<name>\S+)(?: - owner thread: (?P<owner>", HEX, r"))?"
                  r"(?P<rest>.*)$"),),
        examples=("VM Mutex/Monitor currently owned by a thread:  ([mutex/lock_event])",
                  "VM Mutex/Monitor currently owned by a thread: None"),
        body_examples=("[0x00007fcbc8008420] Threads_lock - owner thread: 0x00007fcbc82b6000",),
    ),
    SectionGrammar(
        EventKind.ZGC_GLOBALS,
        headers=(_re(r"^ZGC Globals:\s*$"),),
        body=(_re(r"^\s?(?P<key>GlobalPhase|GlobalSeqNum|Offset Max|Old Collection|Young Collection|"
                  r"Page Size (?:Medium|Small)|Medium Page Size):\s+(?P<value>.*?)\s*$"),),
        examples=("ZGC Globals:",),
        body_examples=(" GlobalPhase:       2 (Relocate)", "GlobalSeqNum:      753", "Page Size Small:   2M"),
    ),
    SectionGrammar(
        EventKind.ZGC_METADATA_BITS,
        headers=(_re(r"^ZGC Metadata Bits:\s*$"),),
        body=(_re(r"^\s(?P<key>\w+):\s+(?P<value>", HEX, r")\s*$"),),
        examples=("ZGC Metadata Bits:",),
        body_examples=(" Good:              0x0000400000000000", " WeakBad:           0x0000300000000000"),
    ),
    SectionGrammar(
        EventKind.ZGC_PAGE_TABLE,
        headers=(_re(r"^ZGC Page Table:\s*$"),),
        body=(_re(r"^\s*(?P<size>Large|Medium|Small)\s+(?P<start>", ADDRESS, r") (?P<top>", ADDRESS, r") (?P<end>",
                  ADDRESS, r")(?: (?P<generation>[OY])/(?P<age>\d+))?\s+(?P<state>Allocating|Relocatable)\s*$"),),
        examples=("ZGC Page Table:",),
        body_examples=("Small   0x0000000007200000 0x00000000073fffa8 0x0000000007400000  Relocatable",),
    ),
)


# =========================================================================
# Standalone facts and throwaway lines
# =========================================================================

STANDALONE_GRAMMARS = (
    StandaloneGrammar(
        EventKind.HEADER, _re(r"^#(?P<text>.*?)\s*$"),
        examples=("#", "# A fatal error has been detected by the Java Runtime Environment:",
                  "#  SIGSEGV (0xb) at pc=0x00007fcbd05a3b71, pid=52385, tid=0x00007fcbcc677700",
                  "# JRE version: Java(TM) SE Runtime Environment (8.0_192-b12) (build 1.8.0_192-b12)",
                  "# V  [libjvm.so+0x645b71]  oopDesc::size_given_klass(Klass*)+0x1"),
    ),
    StandaloneGrammar(
        EventKind.TIMEOUT,
        _re(r"^(?:\[timeout occurred during error reporting in step \"(?P<step>[^\"]*)\"\] after (?P<seconds>\d+) s\.?"
            r"|-+ Timeout during error reporting after (?P<total>\d+) s\. -+)\s*$"),
        examples=('[timeout occurred during error reporting in step "printing summary machine and OS info"] '
                  'after 30 s. ',
                  "------ Timeout during error reporting after 120 s. ------"),
    ),
    StandaloneGrammar(
        EventKind.HEADING,
        _re(r"^(?:-{15}\s+(?P<title>[A-Z](?: [A-Z])+)\s+-{12,15}|\s?-{19,}\s?)$"),
        examples=("---------------  T H R E A D  ---------------",
                  "---------------  S Y S T E M  ---------------",
                  "----------------------------------------------------------------------"),
    ),
    StandaloneGrammar(
        EventKind.TIME_ELAPSED_TIME,
        _re(r"^Time: (?P<time>.+?) elapsed time: (?P<seconds>\d{1,10}(?:\.\d{1,6})?) seconds"
            r"(?: \((?P<breakdown>[^)]*)\))?\s*$"),
        examples=("Time: Tue May  5 18:32:04 2020 CEST elapsed time: 956 seconds (0d 0h 15m 56s)",),
    ),
    StandaloneGrammar(
        EventKind.ELAPSED_TIME,
        _re(r"^elapsed time: (?P<seconds>\d{1,10}(?:\.\d{1,6})?) seconds(?: \((?P<breakdown>[^)]*)\))?\s*$"),
        examples=("elapsed time: 855185 seconds (9d 21h 33m 4s)", "elapsed time: 0.606413 seconds (0d 0h 0m 0s)",
                  "elapsed time: 228058 seconds"),
    ),
    StandaloneGrammar(
        EventKind.TIME, _re(r"^time: (?P<time>.+?)\s*$"),
        examples=("time: Tue Aug 18 14:10:59 2020",),
    ),
    StandaloneGrammar(
        EventKind.TIMEZONE, _re(r"^timezone: (?P<timezone>.+?)\s*$"),
        examples=("timezone: UTC",),
    ),
    StandaloneGrammar(
        EventKind.COMMAND_LINE, _re(r"^Command Line:\s?(?P<text>.*?)\s*$"),
        examples=("Command Line: -Xmx2048m -Xmx12G -Xms1G", "Command Line:", "Command Line: -Xmx2048m TestCrash"),
    ),
    StandaloneGrammar(
        EventKind.CURRENT_THREAD,
        _re(r"^Current thread(?: \((?P<address>", HEX, r")\):)?\s{1,2}(?P<text>.+?)\s*$"),
        examples=('Current thread (0x00007f127434f800):  JavaThread "ajp-/hostname:8109-16" daemon '
                  '[_thread_in_native, id=112672, stack(0x00007f11e11a2000,0x00007f11e12a3000)]',
                  "Current thread is native thread"),
    ),
    StandaloneGrammar(
        EventKind.SIGINFO,
        _re(r"^siginfo:\s?(?P<text>(?:si_signo: \d+ \(\w+\)|ExceptionCode=0x[0-9a-fA-F]+|"
            r"EXCEPTION_\w+ \(0x[0-9a-fA-F]+\)).*?)\s*$"),
        examples=("siginfo: si_signo: 11 (SIGSEGV), si_code: 1 (SEGV_MAPERR), si_addr: 0x0000000000000008",
                  "siginfo: ExceptionCode=0xc0000005, reading address 0x0000000000000048",
                  "siginfo: ExceptionCode=0xc00000fd, ExceptionInformation=0x0000000000000001 0x00000000c9dd0000",
                  "siginfo: EXCEPTION_ACCESS_VIOLATION (0xc0000005), reading address 0xffffffffffffffff",
                  "siginfo: si_signo: 11 (SIGSEGV), si_code: 0 (SI_USER), sent from pid: 107614 (uid: 1000)",
                  "siginfo: si_signo: 7 (SIGBUS), si_code: 0 (SI_USER), si_pid: 1008245, si_uid: 0"),
    ),
    StandaloneGrammar(
        EventKind.VM_INFO,
        _re(r"^vm_info: (?P<vm>.+?) \((?P<vm_version>[^)]*)\) for (?P<os>\w+)-(?P<arch>\w+) (?:JRE|JDK) "
            r"(?P<builds>(?:\([^)]*\) ?)+)(?:, built on (?P<built>.+?)(?: by \\?\"(?P<builder>[^\"\\]*)\\?\")?"
            r"(?: with (?P<compiler>.*?))?)?\s*$"),
        examples=('vm_info: Java HotSpot(TM) 64-Bit Server VM (25.192-b12) for linux-amd64 JRE (1.8.0_192-b12), '
                  'built on Oct  6 2018 06:46:09 by "java_re" with gcc 7.3.0',
                  'vm_info: OpenJDK 64-Bit Server VM (25.252-b14) for linux-amd64 JRE (Zulu 8.46.0.52-SA-linux64) '
                  '(1.8.0_252-b14), built on Apr 22 2020 07:39:02 by "zulu_re" with gcc 4.4.7 20120313',
                  'vm_info: OpenJDK 64-Bit Server VM (11.0.5+10-LTS) for linux-amd64 JRE (11.0.5+10-LTS), '
                  'built on Oct  9 2019 18:41:22 by "mockbuild" with gcc 4.8.5 20150623 (Red Hat 4.8.5-39)'),
    ),
    StandaloneGrammar(
        EventKind.VM_STATE, _re(r"^VM state:\s?(?P<state>.+?)\s*$"),
        examples=("VM state:at safepoint (normal execution)", "VM state: not at safepoint (normal execution)"),
    ),
    StandaloneGrammar(
        EventKind.VM_OPERATION,
        _re(r"^VM_Operation \((?P<address>", HEX, r")\): (?P<operation>\w+)(?P<rest>.*)$"),
        examples=("VM_Operation (0x00007fffaa62ab20): PrintThreads, mode: safepoint, requested by thread "
                  "0x0000000001b2a000",),
    ),
    StandaloneGrammar(
        EventKind.HEAP_ADDRESS,
        _re(r"^[hH]eap address: (?P<address>", HEX, r"), size: (?P<size>\d+) MB(?:, (?P<rest>.*?))?\s*$"),
        examples=("heap address: 0x00000003c0000000, size: 16384 MB, Compressed Oops mode: Zero based, "
                  "Oop shift amount: 3",),
    ),
    StandaloneGrammar(
        EventKind.CARD_TABLE,
        _re(r"^Card table byte_map: \[(?P<start>", HEX, r"),(?P<end>", HEX, r")\] _?byte_map_base: (?P<base>", HEX,
            r")\s*$"),
        examples=("Card table byte_map: [0x00007f69332bf000,0x00007f6964000000] _byte_map_base: 0x00007f695b8bf000",),
    ),
    StandaloneGrammar(
        EventKind.POLLING_PAGE, _re(r"^Polling page: (?P<address>", HEX, r")\s*$"),
        examples=("Polling page: 0x00007fcbd1b68000",),
    ),
    StandaloneGrammar(
        EventKind.BARRIER_SET, _re(r"^(?P<name>(?:X|Z|Shenandoah)BarrierSet)\s*$"),
        examples=("ZBarrierSet", "XBarrierSet"),
    ),
    StandaloneGrammar(
        EventKind.CDS_ARCHIVE, _re(r"^CDS archive\(s\) (?:mapped at: (?P<text>.*?)|(?P<not_mapped>not mapped))\s*$"),
        examples=("CDS archive(s) mapped at: [0x0000000800000000-0x0000000800be2000-0x0000000800be2000), "
                  "size 12460032, SharedBaseAddress: 0x0000000800000000, ArchiveRelocationMode: 0.",
                  "CDS archive(s) not mapped"),
    ),
    StandaloneGrammar(
        EventKind.DECODING_CODE_BLOB, _re(r"^Decoding CodeBlob, name: (?P<name>[^,]+)(?P<rest>.*)$"),
        examples=("Decoding CodeBlob, name: _new_array_nozero_Java, at  [0x00007fabe8324180, 0x00007fabe83241e8]  "
                  "104 bytes",),
    ),
    StandaloneGrammar(
        EventKind.HOST, _re(r"^Host:\s?(?P<text>.*?)\s*$"),
        examples=("Host: Intel Core Processor (Skylake), 8 cores, 31G, Red Hat Enterprise Linux Workstation "
                  "release 7.4 (Maipo)",),
    ),
    StandaloneGrammar(
        EventKind.JVMTI_AGENTS, _re(r"^JVMTI agents:\s?(?P<text>.*?)\s*$"),
        examples=("JVMTI agents: none",),
    ),
    StandaloneGrammar(
        EventKind.LIBC, _re(r"^libc:\s?(?P<name>\w+) (?P<version>\S+)(?P<rest>.*)$"),
        examples=("libc:glibc 2.12 NPTL 2.12",),
    ),
    StandaloneGrammar(
        EventKind.LOAD_AVERAGE, _re(r"^load average:\s?(?P<text>.+?)\s*$"),
        examples=("load average:0.39 0.39 0.42",),
    ),
    StandaloneGrammar(
        EventKind.NATIVE_DECODER_STATE, _re(r"^(?P<decoder>dbghelp|symbol engine): (?P<text>.+)$"),
        examples=("dbghelp: loaded successfully - version: 4.0.5 - missing functions: none",),
    ),
    StandaloneGrammar(
        EventKind.OS_UPTIME, _re(r"^OS uptime:\s?(?P<text>.+?)\s*$"),
        examples=("OS uptime: 3 days 8:33 hours",),
    ),
    StandaloneGrammar(
        EventKind.PID, _re(r"^(?P<pid>\d+):\s*$"),
        examples=("12345:",),
    ),
    StandaloneGrammar(
        EventKind.RLIMIT, _re(r"^rlimit(?: \(soft/hard\))?:\s?(?P<text>.+?)\s*$"),
        examples=("rlimit: STACK 10240k, CORE 0k, NPROC 16384, NOFILE 16384, AS infinity",
                  "rlimit (soft/hard): STACK 8192k/infinity , CORE 0k/infinity , NPROC 63353/63353"),
    ),
    # ---- Throwaway ----
    StandaloneGrammar(
        EventKind.BLANK_LINE, _re(r"^\s*$"), role=Role.THROWAWAY,
        examples=("", "   "),
    ),
    StandaloneGrammar(
        EventKind.END, _re(r"^END\.\s*$"), role=Role.THROWAWAY,
        examples=("END.",),
    ),
    StandaloneGrammar(
        EventKind.END_BRACE, _re(r"^\}\s*$"), role=Role.THROWAWAY,
        examples=("}",),
    ),
    StandaloneGrammar(
        EventKind.NUMBER, _re(r"^(?P<value>\d+)\s*$"), role=Role.THROWAWAY,
        examples=("32768",),
    ),
)


GRAMMARS: Dict[EventKind, Grammar] = {
    grammar.kind: grammar for grammar in RING_GRAMMARS + SECTION_GRAMMARS + STANDALONE_GRAMMARS
}

SECTION_KINDS = frozenset(kind for kind, grammar in GRAMMARS.items() if grammar.opens_section)
STANDALONE_KINDS = frozenset(
    kind for kind, grammar in GRAMMARS.items()
    if not grammar.opens_section and kind not in THROWAWAY_KINDS
)


# =========================================================================
# Audited header order
# =========================================================================

# Tried top to bottom for any line that does not continue the open section.
# Order matters: a grammar must come before every grammar that would also
# accept its header lines. Kinds whose headers are textually disjoint keep
# alphabetical order inside their group so additions are easy to audit.
HEADER_ORDER: Tuple[Grammar, ...] = tuple(GRAMMARS[kind] for kind in (
    # Fixed single-character prefixes and blank lines
    EventKind.BLANK_LINE,
    EventKind.HEADER,
    EventKind.END,
    EventKind.END_BRACE,
    # Dashed lines: the timeout banner is also a run of dashes
    EventKind.TIMEOUT,
    EventKind.HEADING,
    # "Time: ... elapsed time: ..." contains the elapsed time fact
    EventKind.TIME_ELAPSED_TIME,
    EventKind.ELAPSED_TIME,
    EventKind.TIME,
    EventKind.TIMEZONE,
    # Ring buffer sections
    EventKind.CLASSES_LOADED,
    EventKind.CLASSES_REDEFINED,
    EventKind.CLASSES_UNLOADED,
    EventKind.COMPILATION_EVENTS,
    EventKind.DEOPTIMIZATION_EVENTS,
    EventKind.DLL_OPERATION_EVENTS,
    EventKind.EVENTS,
    EventKind.GC_HEAP_HISTORY,
    EventKind.INTERNAL_EXCEPTIONS,
    EventKind.MEMORY_PROTECTIONS,
    EventKind.NMETHOD_FLUSHES,
    EventKind.VM_OPERATIONS,
    EventKind.ZGC_PHASE_SWITCH,
    # "OS uptime:" before "OS:" style prefixes
    EventKind.OS_UPTIME,
    EventKind.OS,
    # Heap family: "Heap:", "Heap Regions:", "heap address:"
    EventKind.HEAP_REGIONS,
    EventKind.HEAP_ADDRESS,
    EventKind.HEAP,
    # Current thread vs current compile task
    EventKind.CURRENT_COMPILE_TASK,
    EventKind.CURRENT_THREAD,
    # /proc and /sys files
    EventKind.MAX_MAP_COUNT,
    EventKind.MEMINFO,
    EventKind.PID_MAX,
    EventKind.THREADS_MAX,
    EventKind.TRANSPARENT_HUGEPAGE,
    EventKind.LD_PRELOAD_FILE,
    # Remaining section headers
    EventKind.ACTIVE_LOCALE,
    EventKind.CLASS_INFO,
    EventKind.CODE_CACHE,
    EventKind.COMPILED_METHOD,
    EventKind.CONTAINER_INFO,
    EventKind.CPU_INFO,
    EventKind.DYNAMIC_LIBRARIES,
    EventKind.ENVIRONMENT_VARIABLES,
    EventKind.EXCEPTION_COUNTS,
    EventKind.GC_PRECIOUS_LOG,
    EventKind.GLOBAL_FLAGS,
    EventKind.INSTRUCTIONS,
    EventKind.INTERNAL_STATISTICS,
    EventKind.LOCK_STACK,
    EventKind.LOGGING,
    EventKind.MACH_CODE,
    EventKind.MARKING_BITS,
    EventKind.MEMORY,
    EventKind.METASPACE,
    EventKind.NATIVE_MEMORY_TRACKING,
    EventKind.PROCESS_MEMORY,
    EventKind.REGISTERS,
    EventKind.REGISTER_TO_MEMORY_MAPPING,
    EventKind.RELEASE_FILE,
    EventKind.SIGNAL_HANDLERS,
    EventKind.STACK,
    EventKind.STACK_SLOT_TO_MEMORY_MAPPING,
    EventKind.THREADS,
    EventKind.THREADS_ACTIVE_COMPILE,
    EventKind.THREADS_CLASS_SMR_INFO,
    EventKind.TOP_OF_STACK,
    EventKind.UNAME,
    EventKind.VIRTUALIZATION_INFO,
    EventKind.VM_ARGUMENTS,
    EventKind.VM_MUTEX,
    EventKind.ZGC_GLOBALS,
    EventKind.ZGC_METADATA_BITS,
    EventKind.ZGC_PAGE_TABLE,
    # Standalone facts
    EventKind.BARRIER_SET,
    EventKind.CARD_TABLE,
    EventKind.CDS_ARCHIVE,
    EventKind.COMMAND_LINE,
    EventKind.DECODING_CODE_BLOB,
    EventKind.HOST,
    EventKind.JVMTI_AGENTS,
    EventKind.LIBC,
    EventKind.LOAD_AVERAGE,
    EventKind.NATIVE_DECODER_STATE,
    EventKind.POLLING_PAGE,
    EventKind.RLIMIT,
    EventKind.SIGINFO,
    EventKind.VM_INFO,
    EventKind.VM_OPERATION,
    EventKind.VM_STATE,
    # Bare numbers last: "12345:" is a pid, "12345" is noise
    EventKind.PID,
    EventKind.NUMBER,
))


def _check_catalogue() -> None:
    """Every kind has exactly one grammar or is special, and every grammar is ordered."""
    missing = set(EventKind) - set(GRAMMARS) - SPECIAL_KINDS
    if missing:
        raise RuntimeError(f"Event kinds without a grammar: {sorted(k.name for k in missing)}")
    ordered = [grammar.kind for grammar in HEADER_ORDER]
    if len(ordered) != len(set(ordered)):
        raise RuntimeError("HEADER_ORDER lists a kind twice")
    unordered = set(GRAMMARS) - set(ordered)
    if unordered:
        raise RuntimeError(f"Grammars missing from HEADER_ORDER: {sorted(k.name for k in unordered)}")
    not_ring = RING_BUFFER_KINDS - SECTION_KINDS
    if not_ring:
        raise RuntimeError(f"Ring buffer kinds without a section grammar: {sorted(k.name for k in not_ring)}")


_check_catalogue()
