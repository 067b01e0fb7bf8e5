#!python3
"""
Value normalizers shared by the event builders.

Every normalizer turns a small textual value found in a fatal error log into a
canonical Python value:

- ByteSize: ``1048576 kB`` / ``1024 MB`` / ``1G`` -> byte count (base 1024)
- HexAddress: ``00007fcbd05a3b71`` / ``0x7FCB...`` -> integer with canonical text
- SignalDescriptor: POSIX ``siginfo`` rows and Windows exception rows
- OsFingerprint: OS prose strings and os-release ``KEY=VALUE`` rows
- Device: device id column of a /proc/<pid>/maps row
- Java release strings: ``1.8.0_192-b12`` -> feature release 8
"""

import re
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Optional, Tuple


# =========================================================================
# Byte sizes
# =========================================================================

KILO = 1024

# Every unit is base 1024, including the "kB"/"KB" spellings the JVM prints
BYTE_UNITS: Dict[str, int] = {
    "": 1,
    "b": 1, "B": 1,
    "k": KILO, "K": KILO, "kb": KILO, "kB": KILO, "Kb": KILO, "KB": KILO, "KiB": KILO,
    "m": KILO ** 2, "M": KILO ** 2, "mb": KILO ** 2, "Mb": KILO ** 2, "MB": KILO ** 2, "MiB": KILO ** 2,
    "g": KILO ** 3, "G": KILO ** 3, "gb": KILO ** 3, "Gb": KILO ** 3, "GB": KILO ** 3, "GiB": KILO ** 3,
    "t": KILO ** 4, "T": KILO ** 4, "tb": KILO ** 4, "TB": KILO ** 4, "TiB": KILO ** 4,
}

_BYTE_SIZE_RE = re.compile(r"^\s*(?P<number>\d+(?:[\.,]\d+)?)\s*(?P<unit>[A-Za-z]*)\s*$")


@dataclass(frozen=True, order=True)
class ByteSize:
    """A quantity of memory as a canonical number of bytes."""

    bytes: int

    @classmethod
    def parse(cls, text: str) -> "ByteSize":
        """
        Parse a size such as ``1048576 kB``, ``31907M`` or ``1.5 GB``.

        Args:
            text: Magnitude with an optional unit (bytes when omitted)

        Returns:
            ByteSize with the byte count rounded half up

        Raises:
            ValueError: If the text is not a size or the unit is unknown
        """
        match = _BYTE_SIZE_RE.match(text)
        if not match:
            raise ValueError(f"Not a byte size: {text!r}")
        return cls.from_parts(match.group("number"), match.group("unit"))

    @classmethod
    def from_parts(cls, number: str, unit: str = "") -> "ByteSize":
        """Build a ByteSize from a magnitude string and a unit token."""
        if unit not in BYTE_UNITS:
            raise ValueError(f"Unknown byte unit: {unit!r}")
        try:
            magnitude = Decimal(number.replace(",", "."))
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {number!r}") from e
        total = (magnitude * BYTE_UNITS[unit]).to_integral_value(rounding=ROUND_HALF_UP)
        return cls(int(total))

    def to_unit(self, unit: str) -> Decimal:
        """Express the size in another unit (``K``, ``MB``, ...)."""
        return Decimal(self.bytes) / BYTE_UNITS[unit]

    def __str__(self) -> str:
        return f"{self.bytes}B"


# =========================================================================
# Hex addresses
# =========================================================================

_HEX_RE = re.compile(r"^\s*(?:0[xX])?(?P<digits>[0-9a-fA-F]+)\s*$")


@dataclass(frozen=True, order=True)
class HexAddress:
    """A memory address; equality and ordering use the numeric value only."""

    value: int
    # Digits printed in the log, kept so the canonical text preserves padding
    width: int = field(default=0, compare=False)

    @classmethod
    def parse(cls, text: str) -> "HexAddress":
        """Parse ``0x00007fcb...``, ``00007fcb...`` or ``0xB`` (any case)."""
        match = _HEX_RE.match(text)
        if not match:
            raise ValueError(f"Not a hex address: {text!r}")
        digits = match.group("digits")
        return cls(int(digits, 16), len(digits))

    @property
    def is_null(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return f"0x{self.value:0{self.width}x}"


def parse_hex_list(text: str) -> Tuple[HexAddress, ...]:
    """Extract every address token from ``[a, b, c)`` style text, in order."""
    return tuple(HexAddress.parse(token) for token in re.findall(r"(?:0x)?[0-9a-fA-F]{8,16}", text))


# =========================================================================
# Signals
# =========================================================================

class SignalNumber(Enum):
    """POSIX signal numbers seen in fatal error logs."""
    SIGQUIT = 3
    SIGILL = 4
    SIGTRAP = 5
    SIGABRT = 6
    SIGBUS = 7
    SIGFPE = 8
    SIGSEGV = 11
    UNKNOWN = -1

    @classmethod
    def from_name(cls, name: str) -> "SignalNumber":
        return cls.__members__.get(name, cls.UNKNOWN)

    @classmethod
    def from_number(cls, number: int) -> "SignalNumber":
        try:
            return cls(number)
        except ValueError:
            return cls.UNKNOWN


class SignalCode(Enum):
    """Signal codes (``si_code``) and Windows exception names."""
    BUS_ADRALN = "BUS_ADRALN"
    BUS_ADRERR = "BUS_ADRERR"
    BUS_OBJERR = "BUS_OBJERR"
    FPE_INTDIV = "FPE_INTDIV"
    ILL_ILLOPN = "ILL_ILLOPN"
    SEGV_ACCERR = "SEGV_ACCERR"
    SEGV_MAPERR = "SEGV_MAPERR"
    SI_KERNEL = "SI_KERNEL"
    SI_TKILL = "SI_TKILL"
    SI_USER = "SI_USER"
    EXCEPTION_ACCESS_VIOLATION = "EXCEPTION_ACCESS_VIOLATION"
    EXCEPTION_STACK_OVERFLOW = "EXCEPTION_STACK_OVERFLOW"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_name(cls, name: str) -> "SignalCode":
        return cls.__members__.get(name, cls.UNKNOWN)


# Windows exception code -> nearest POSIX signal and code
WINDOWS_EXCEPTIONS: Dict[int, Tuple[SignalNumber, SignalCode]] = {
    0xc0000005: (SignalNumber.SIGSEGV, SignalCode.EXCEPTION_ACCESS_VIOLATION),
    0xc00000fd: (SignalNumber.SIGSEGV, SignalCode.EXCEPTION_STACK_OVERFLOW),
    0xc000001d: (SignalNumber.SIGILL, SignalCode.UNKNOWN),   # illegal instruction
    0xc0000096: (SignalNumber.SIGILL, SignalCode.UNKNOWN),   # privileged instruction
    0xc0000094: (SignalNumber.SIGFPE, SignalCode.FPE_INTDIV),
    0x80000003: (SignalNumber.SIGTRAP, SignalCode.UNKNOWN),  # breakpoint
    0xc0000006: (SignalNumber.SIGBUS, SignalCode.UNKNOWN),   # in-page error
}

_POSIX_SIGINFO_RE = re.compile(
    r"si_signo: (?P<signo>\d{1,2}) \((?P<signame>\w+)\)"
    r"(?:, si_code: (?P<code>-?\d{1,3}) \((?P<codename>\w+)\))?"
    r"(?:, (?:si_addr: (?P<addr>(?:0x)?[0-9a-fA-F]+)"
    r"|(?:sent from pid|si_pid): (?P<pid>\d+)))?"
)

_WINDOWS_SIGINFO_RE = re.compile(
    r"(?:ExceptionCode=(?P<code>0x[0-9a-fA-F]+)|(?P<name>EXCEPTION_\w+) \((?P<named_code>0x[0-9a-fA-F]+)\))"
    r"(?:, (?P<access>reading|writing) address (?P<addr>(?:0x)?[0-9a-fA-F]+))?"
)


@dataclass(frozen=True)
class SignalDescriptor:
    """Platform-neutral description of the signal that killed the JVM."""

    number: SignalNumber
    code: Optional[SignalCode] = None
    address: Optional[HexAddress] = None
    platform: str = "posix"   # 'posix' or 'windows'
    raw_code: Optional[int] = None
    access: Optional[str] = None   # 'reading' / 'writing' (Windows only)
    sender_pid: Optional[int] = None

    @classmethod
    def from_windows_code(cls, code: int, address: Optional[HexAddress] = None,
                          access: Optional[str] = None) -> "SignalDescriptor":
        """Map a Windows exception code onto the nearest POSIX signal."""
        number, signal_code = WINDOWS_EXCEPTIONS.get(code, (SignalNumber.UNKNOWN, SignalCode.UNKNOWN))
        return cls(number, signal_code, address, "windows", code, access)

    def to_dict(self) -> dict:
        return {
            "signal": self.number.name,
            "signal_number": self.number.value,
            "code": self.code.name if self.code else None,
            "address": str(self.address) if self.address else None,
            "platform": self.platform,
            "raw_code": self.raw_code,
            "access": self.access,
            "sender_pid": self.sender_pid,
        }


def parse_signal(text: str) -> SignalDescriptor:
    """
    Normalize a POSIX or Windows signal description.

    Accepts the payload of ``siginfo:`` rows, for example
    ``si_signo: 11 (SIGSEGV), si_code: 1 (SEGV_MAPERR), si_addr: 0x8`` or
    ``ExceptionCode=0xc0000005, reading address 0x48``.

    Raises:
        ValueError: If neither form is present
    """
    match = _POSIX_SIGINFO_RE.search(text)
    if match:
        number = SignalNumber.from_name(match.group("signame"))
        if number is SignalNumber.UNKNOWN:
            number = SignalNumber.from_number(int(match.group("signo")))
        codename = match.group("codename")
        return SignalDescriptor(
            number=number,
            code=SignalCode.from_name(codename) if codename else None,
            address=HexAddress.parse(match.group("addr")) if match.group("addr") else None,
            platform="posix",
            raw_code=int(match.group("code")) if match.group("code") else None,
            sender_pid=int(match.group("pid")) if match.group("pid") else None,
        )
    match = _WINDOWS_SIGINFO_RE.search(text)
    if match:
        code = int(match.group("code") or match.group("named_code"), 16)
        address = HexAddress.parse(match.group("addr")) if match.group("addr") else None
        return SignalDescriptor.from_windows_code(code, address, match.group("access"))
    raise ValueError(f"No signal description in {text!r}")


def parse_banner_signal(name: str, code: str, pc: Optional[str] = None) -> SignalDescriptor:
    """Normalize the ``#  SIGSEGV (0xb) at pc=...`` banner line parts."""
    address = HexAddress.parse(pc) if pc else None
    if name.startswith("SIG"):
        number = SignalNumber.from_name(name)
        if number is SignalNumber.UNKNOWN:
            number = SignalNumber.from_number(int(code, 16))
        return SignalDescriptor(number, None, address, "posix", int(code, 16))
    return SignalDescriptor.from_windows_code(int(code, 16), address)


# =========================================================================
# OS fingerprints
# =========================================================================

class OsFamily(Enum):
    LINUX = "linux"
    WINDOWS = "windows"
    SOLARIS = "solaris"
    MACOS = "macos"
    AIX = "aix"


class OsVendor(Enum):
    REDHAT = "redhat"
    CENTOS = "centos"
    ORACLE = "oracle"
    UBUNTU = "ubuntu"
    DEBIAN = "debian"
    SUSE = "suse"
    AMAZON = "amazon"
    ALPINE = "alpine"
    MICROSOFT = "microsoft"
    APPLE = "apple"
    IBM = "ibm"


@dataclass(frozen=True)
class OsFingerprint:
    """OS family, vendor and version; unknown parts stay None."""

    family: Optional[OsFamily] = None
    vendor: Optional[OsVendor] = None
    version: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.family is None and self.vendor is None and self.version is None

    def merge(self, other: "OsFingerprint") -> "OsFingerprint":
        """Fill the fields this fingerprint lacks from ``other``."""
        return replace(
            self,
            family=self.family or other.family,
            vendor=self.vendor or other.vendor,
            version=self.version or other.version,
        )

    def to_dict(self) -> dict:
        return {
            "family": self.family.value if self.family else None,
            "vendor": self.vendor.value if self.vendor else None,
            "version": self.version,
        }


# Each tuple: (compiled_regex, family, vendor, example)
# Order matters: vendor-specific distributions before the bare "Linux" catch-all.
OS_PROSE_PATTERNS = [
    (re.compile(r"Red Hat Enterprise Linux(?: Server| Workstation| AS| ES)? release (?P<version>\d+(?:\.\d+)?)"),
     OsFamily.LINUX, OsVendor.REDHAT, "Red Hat Enterprise Linux Server release 7.7 (Maipo)"),
    (re.compile(r"CentOS(?: Linux| Stream)? release (?P<version>\d+(?:\.\d+)?)"),
     OsFamily.LINUX, OsVendor.CENTOS, "CentOS Linux release 7.9.2009 (Core)"),
    (re.compile(r"Oracle Linux Server release (?P<version>\d+(?:\.\d+)?)"),
     OsFamily.LINUX, OsVendor.ORACLE, "Oracle Linux Server release 7.9"),
    (re.compile(r"Oracle Solaris (?P<version>\d+(?:\.\d+)?)"),
     OsFamily.SOLARIS, OsVendor.ORACLE, "Oracle Solaris 11.4 SPARC"),
    (re.compile(r"Solaris (?P<version>\d+(?:\.\d+)?)"),
     OsFamily.SOLARIS, None, "Solaris 10 10/09 s10s_u8wos_08a SPARC"),
    (re.compile(r"Ubuntu (?P<version>\d+\.\d+(?:\.\d+)?)"),
     OsFamily.LINUX, OsVendor.UBUNTU, "DISTRIB_DESCRIPTION=\"Ubuntu 18.04.4 LTS\""),
    (re.compile(r"Debian GNU/Linux (?P<version>\d+)"),
     OsFamily.LINUX, OsVendor.DEBIAN, "Debian GNU/Linux 10 (buster)"),
    (re.compile(r"SUSE Linux Enterprise Server (?P<version>\d+(?: SP\d+)?)"),
     OsFamily.LINUX, OsVendor.SUSE, "SUSE Linux Enterprise Server 15 SP2"),
    (re.compile(r"Amazon Linux(?: release)? (?P<version>\d+)"),
     OsFamily.LINUX, OsVendor.AMAZON, "Amazon Linux 2"),
    (re.compile(r"Alpine Linux v?(?P<version>\d+\.\d+)"),
     OsFamily.LINUX, OsVendor.ALPINE, "Alpine Linux v3.12"),
    (re.compile(r"Windows (?P<version>Server \d{4}(?: R2)?|\d{1,2}(?:\.\d)?)\b"),
     OsFamily.WINDOWS, OsVendor.MICROSOFT, "Windows Server 2016 , 64 bit Build 14393 (10.0.14393.3630)"),
    (re.compile(r"(?:Mac OS X|macOS) (?P<version>\d+\.\d+(?:\.\d+)?)"),
     OsFamily.MACOS, OsVendor.APPLE, "macOS 12.6"),
    (re.compile(r"\bAIX\b(?: (?P<version>\d+\.\d+))?"),
     OsFamily.AIX, OsVendor.IBM, "AIX 7.2"),
    (re.compile(r"\bLinux\b"),
     OsFamily.LINUX, None, "Linux"),
]

# os-release ID= values
OS_RELEASE_IDS: Dict[str, Tuple[OsFamily, OsVendor]] = {
    "rhel": (OsFamily.LINUX, OsVendor.REDHAT),
    "centos": (OsFamily.LINUX, OsVendor.CENTOS),
    "ol": (OsFamily.LINUX, OsVendor.ORACLE),
    "ubuntu": (OsFamily.LINUX, OsVendor.UBUNTU),
    "debian": (OsFamily.LINUX, OsVendor.DEBIAN),
    "sles": (OsFamily.LINUX, OsVendor.SUSE),
    "amzn": (OsFamily.LINUX, OsVendor.AMAZON),
    "alpine": (OsFamily.LINUX, OsVendor.ALPINE),
}

_KEY_VALUE_RE = re.compile(r'^\s*(?P<key>[A-Z][A-Z_]*)="?(?P<value>[^"]*)"?\s*$')


def _fingerprint_from_prose(text: str) -> OsFingerprint:
    for regex, family, vendor, _ in OS_PROSE_PATTERNS:
        match = regex.search(text)
        if match:
            return OsFingerprint(family, vendor, match.groupdict().get("version"))
    return OsFingerprint()


def _fingerprint_from_release(key: str, value: str) -> OsFingerprint:
    if key == "ID":
        family, vendor = OS_RELEASE_IDS.get(value.strip().lower(), (None, None))
        return OsFingerprint(family, vendor)
    if key == "VERSION_ID":
        return OsFingerprint(version=value.strip() or None)
    if key in ("NAME", "PRETTY_NAME", "DISTRIB_DESCRIPTION"):
        return _fingerprint_from_prose(value)
    return OsFingerprint()


def match_os(text: str) -> OsFingerprint:
    """
    Fingerprint an OS description.

    Both prose lines (``Red Hat Enterprise Linux release 8.5 (Ootpa)``) and
    os-release rows (``ID="rhel"``, ``VERSION_ID="8.5"``) are accepted. Text
    that matches no known distribution yields an empty fingerprint.
    """
    match = _KEY_VALUE_RE.match(text)
    if match:
        return _fingerprint_from_release(match.group("key"), match.group("value"))
    return _fingerprint_from_prose(text)


# =========================================================================
# Devices
# =========================================================================

class Device(Enum):
    FIXED_DISK = "fixed_disk"
    NFS = "nfs"
    SCSI_DISK = "scsi_disk"
    CLOUD_BLOCK_STORAGE = "cloud_block_storage"
    UNKNOWN = "unknown"


# Each tuple: (compiled_regex, device)
DEVICE_PATTERNS = [
    (re.compile(r"^fd:[0-9a-f]{2}$"), Device.FIXED_DISK),
    (re.compile(r"^103:0[0-3]$"), Device.CLOUD_BLOCK_STORAGE),
    (re.compile(r"^00:00$"), Device.UNKNOWN),   # anonymous mapping
    (re.compile(r"^00:[0-9a-f]{2}$"), Device.NFS),
    (re.compile(r"^08:[0-9]{2}$"), Device.SCSI_DISK),
]


def classify_device(device_id: Optional[str], path: Optional[str] = None) -> Device:
    """Classify the storage behind a mapped file from its ``major:minor`` id."""
    if not device_id:
        return Device.UNKNOWN
    if path and path.startswith("["):
        return Device.UNKNOWN
    for regex, device in DEVICE_PATTERNS:
        if regex.match(device_id):
            return device
    return Device.UNKNOWN


# =========================================================================
# Architecture and Java release
# =========================================================================

class Arch(Enum):
    X86_64 = "x86_64"
    X86 = "x86"
    AARCH64 = "aarch64"
    PPC64 = "ppc64"
    PPC64LE = "ppc64le"
    SPARC = "sparc"
    S390X = "s390x"


ARCH_TOKENS: Dict[str, Arch] = {
    "amd64": Arch.X86_64,
    "x86_64": Arch.X86_64,
    "x86": Arch.X86,
    "i86pc": Arch.X86,
    "aarch64": Arch.AARCH64,
    "ppc64": Arch.PPC64,
    "ppc64le": Arch.PPC64LE,
    "sparc": Arch.SPARC,
    "sparcv9": Arch.SPARC,
    "sun4v": Arch.SPARC,
    "s390x": Arch.S390X,
}


def parse_arch(token: str) -> Optional[Arch]:
    return ARCH_TOKENS.get(token.strip().lower())


_LEGACY_RELEASE_RE = re.compile(r"^1\.(?P<feature>\d+)\.\d+")
_MODERN_RELEASE_RE = re.compile(r"^(?P<feature>\d+)(?:[\.+\-]|$)")


def parse_java_release(release: str) -> Optional[int]:
    """Feature release of a JDK build string: ``1.8.0_192-b12`` -> 8, ``11.0.5+10-LTS`` -> 11."""
    release = release.strip()
    match = _LEGACY_RELEASE_RE.match(release) or _MODERN_RELEASE_RE.match(release)
    if not match:
        return None
    return int(match.group("feature"))

