"""
Shared pytest fixtures for jvmcrash test suite.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from jvmcrash import ParserConfig, set_quiet_mode


# =============================================================================
# Crash log fixtures
# =============================================================================

LINUX_SIGSEGV_LOG = [
    "#",
    "# A fatal error has been detected by the Java Runtime Environment:",
    "#",
    "#  SIGSEGV (0xb) at pc=0x00007fcbd05a3b71, pid=52385, tid=0x00007fcbcc677700",
    "#",
    "# JRE version: Java(TM) SE Runtime Environment (8.0_192-b12) (build 1.8.0_192-b12)",
    "# Java VM: Java HotSpot(TM) 64-Bit Server VM (25.192-b12 mixed mode linux-amd64 compressed oops)",
    "# Problematic frame:",
    "# V  [libjvm.so+0x645b71]  oopDesc::size_given_klass(Klass*)+0x1",
    "#",
    "",
    "---------------  T H R E A D  ---------------",
    "",
    'Current thread (0x00007fcbc82b6000):  JavaThread "main" [_thread_in_vm, id=52386, '
    'stack(0x00007fcbcc577000,0x00007fcbcc678000)]',
    "",
    "Stack: [0x00007fcbcc577000,0x00007fcbcc678000],  sp=0x00007fcbcc676c50,  free space=1019k",
    "Native frames: (J=compiled Java code, j=interpreted, Vv=VM code, C=native code)",
    "V  [libjvm.so+0x645b71]  oopDesc::size_given_klass(Klass*)+0x1",
    "j  java.lang.Thread.run()V+11",
    "v  ~StubRoutines::call_stub",
    "",
    "siginfo: si_signo: 11 (SIGSEGV), si_code: 1 (SEGV_MAPERR), si_addr: 0x0000000000000008",
    "",
    "Registers:",
    "RAX=0x0000000000000001, RBX=0x00007f67383dc748, RCX=0x0000000000000004, RDX=0x00007f69b031f898",
    "",
    "Top of Stack: (sp=0x00007fcbcc676c50)",
    "0x00007fcbcc676c50:   00007fcbcc676cb0 00007fcbd0596b86",
    "",
    "Instructions: (pc=0x00007fcbd05a3b71)",
    "0x00007fcbd05a3b51:   5d c3 0f 1f 44 00 00 48 8d 35 01 db 4c 00 bf 03",
    "",
    "---------------  P R O C E S S  ---------------",
    "",
    "Java Threads: ( => current thread )",
    '=>0x00007fcbc82b6000 JavaThread "main" [_thread_in_vm, id=52386, '
    'stack(0x00007fcbcc577000,0x00007fcbcc678000)]',
    "",
    "VM state:not at safepoint (normal execution)",
    "",
    "VM Mutex/Monitor currently owned by a thread: None",
    "",
    "Heap:",
    " PSYoungGen      total 244736K, used 103751K [0x00000000eab00000, 0x0000000100000000, "
    "0x0000000100000000)",
    "  eden space 141312K, 24% used [0x00000000eab00000,0x00000000ecc7aef8,0x00000000f3500000)",
    " Metaspace       used 139716K, capacity 155778K, committed 155992K, reserved 1183744K",
    "",
    "Deoptimization events (0 events):",
    "No events",
    "",
    "Dll operation events (1 events):",
    "Event: 0.001 Loaded shared library /usr/lib/jvm/java-17-openjdk/lib/libjava.so",
    "",
    "Dynamic libraries:",
    "00400000-00401000 r-xp 00000000 fd:0d 201327127                          /path/to/jdk/bin/java",
    "7ffd5c3d5000-7ffd5c3f6000 rw-p 00000000 00:00 0                          [stack]",
    "",
    "VM Arguments:",
    "jvm_args: -Xms4014m -Xmx5734m",
    "java_command: com.example.Main --port 8080",
    "Launcher Type: SUN_STANDARD",
    "",
    "Environment Variables:",
    "PATH=/usr/bin:/bin",
    "",
    "Signal Handlers:",
    "SIGSEGV: [libjvm.so+0xb73090], sa_mask[0]=11111111011111111101111111111110, sa_flags=SA_RESTART|SA_SIGINFO",
    "",
    "---------------  S Y S T E M  ---------------",
    "",
    "OS:Red Hat Enterprise Linux Server release 7.7 (Maipo)",
    "",
    "uname:Linux 3.10.0-1127.19.1.el7.x86_64 #1 SMP Tue Aug 11 19:12:04 EDT 2020 x86_64",
    "libc:glibc 2.17 NPTL 2.17",
    "rlimit: STACK 8192k, CORE 0k, NPROC 4096, NOFILE 4096, AS infinity",
    "load average:0.39 0.39 0.42",
    "",
    "/proc/meminfo:",
    "MemTotal:       65305448 kB",
    "",
    "CPU:total 8 (initial active 8) (8 cores per cpu, 1 threads per core) family 6 model 158 stepping 13 "
    "microcode 0xf0, cx8, cmov, fxsr, mmx",
    "",
    "Memory: 4k page, physical 16058700k(1456096k free), swap 8097788k(7612768k free)",
    "",
    'vm_info: Java HotSpot(TM) 64-Bit Server VM (25.192-b12) for linux-amd64 JRE (1.8.0_192-b12), '
    'built on Oct  6 2018 06:46:09 by "java_re" with gcc 7.3.0',
    "",
    "time: Tue Aug 18 14:10:59 2020",
    "timezone: UTC",
    "elapsed time: 956 seconds (0d 0h 15m 56s)",
    "",
    "END.",
]

WINDOWS_ACCESS_VIOLATION_LOG = [
    "#",
    "# A fatal error has been detected by the Java Runtime Environment:",
    "#",
    "#  EXCEPTION_ACCESS_VIOLATION (0xc0000005) at pc=0x000000006d8a3d1e, pid=4242, tid=0x0000000000001a2c",
    "#",
    "# JRE version: OpenJDK Runtime Environment (11.0.5+10) (build 11.0.5+10-LTS)",
    "#",
    "",
    "---------------  T H R E A D  ---------------",
    "",
    "siginfo: ExceptionCode=0xc0000005, reading address 0x0000000000000048",
    "",
    "Dynamic libraries:",
    "0x00007ff6dd430000 - 0x00007ff6dd477000 \tC:\\Program Files\\Java\\jdk-11\\bin\\java.exe",
    "",
    "---------------  S Y S T E M  ---------------",
    "",
    "OS: Windows Server 2016 , 64 bit Build 14393 (10.0.14393.3630)",
    "",
    "Memory: 4k page, system-wide physical 16383M (5994M free)",
    "TotalPageFile size 20479M (AvailPageFile size 7532M)",
    "",
    'vm_info: OpenJDK 64-Bit Server VM (11.0.5+10-LTS) for windows-amd64 JRE (11.0.5+10-LTS), '
    'built on Oct  9 2019 18:41:22 by "mockbuild" with MS VC++ 15.9 (VS2017)',
]

TRUNCATED_LOG = [
    "#",
    "# A fatal error has been detected by the Java Runtime Environment:",
    "#",
    "#  SIGBUS (0x7) at pc=0x00007f0a3c9b5e3c, pid=1008245, tid=1008300",
    "",
    "Memory: 4k page, physical 16058700k(1456096k free), swap 8097788k(7612768k free)",
    "[error occurred during error reporting (printing memory info), id 0xb]",
    "",
    "[error occurred during error reporting (printing dynamic libraries), id 0xb]",
    "this line matches nothing at all",
]


@pytest.fixture
def linux_sigsegv_lines():
    """Linux SIGSEGV crash log covering the main sub-reports."""
    return list(LINUX_SIGSEGV_LOG)


@pytest.fixture
def windows_access_violation_lines():
    """Windows access violation crash log."""
    return list(WINDOWS_ACCESS_VIOLATION_LOG)


@pytest.fixture
def truncated_lines():
    """Crash log whose error reporting aborted twice."""
    return list(TRUNCATED_LOG)


@pytest.fixture
def linux_crash_file(tmp_path):
    """Linux crash log written to disk with LF line endings."""
    f = tmp_path / "hs_err_pid52385.log"
    f.write_text("\n".join(LINUX_SIGSEGV_LOG) + "\n", encoding="utf-8")
    return f


@pytest.fixture
def windows_crash_file(tmp_path):
    """Windows crash log written to disk with CRLF line endings."""
    f = tmp_path / "hs_err_pid4242.log"
    f.write_bytes(("\r\n".join(WINDOWS_ACCESS_VIOLATION_LOG) + "\r\n").encode("utf-8"))
    return f


@pytest.fixture
def not_a_crash_file(tmp_path):
    """Plain text file that is not a crash log."""
    f = tmp_path / "notes.txt"
    f.write_text("shopping list\nmilk\nbread\neggs\n", encoding="utf-8")
    return f


@pytest.fixture
def crash_dir(tmp_path):
    """Directory with two crash logs, one of them in a sub-directory."""
    root = tmp_path / "crashes"
    nested = root / "nested"
    nested.mkdir(parents=True)
    (root / "hs_err_pid52385.log").write_text("\n".join(LINUX_SIGSEGV_LOG), encoding="utf-8")
    (nested / "hs_err_pid4242.log").write_text("\n".join(WINDOWS_ACCESS_VIOLATION_LOG), encoding="utf-8")
    return root


# =============================================================================
# Configuration and logging fixtures
# =============================================================================

@pytest.fixture
def default_parser_config():
    """Default ParserConfig for testing."""
    return ParserConfig()


@pytest.fixture
def strict_parser_config():
    """ParserConfig that re-raises grammar defects."""
    return ParserConfig(strict=True, hashes=True)


@pytest.fixture
def test_logger():
    """Logger for tests that don't depend on the jvmcrash logger configuration."""
    logger = logging.getLogger("jvmcrash_tests")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture(autouse=True)
def reset_quiet_mode():
    """Quiet mode is process-wide; leave it off between tests."""
    set_quiet_mode(False)
    yield
    set_quiet_mode(False)
