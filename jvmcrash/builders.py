#!python3
"""
Field extraction for every event kind.

``build(kind, line)`` locates the grammar row that accepted the line (header,
body, footer or standalone pattern) and hands its match to the kind's
extractor. Extractors are grouped by grammar family:

- key/value rows
- hex-range rows
- register rows
- stack-frame rows
- signal rows
- free-text-tail rows
- OS/version rows
- mapped-file rows with device classification

BUILDERS maps every EventKind to exactly one extractor; the mapping is checked
for completeness at import time.
"""

import re
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

from .events import Event, GrammarDefectError
from .grammar import GRAMMARS, RING_ROW, NO_EVENTS_ROW, SectionGrammar
from .kinds import EventKind, Role, RING_BUFFER_KINDS
from .normalizers import (
    BYTE_UNITS,
    ByteSize,
    HexAddress,
    classify_device,
    match_os,
    parse_arch,
    parse_banner_signal,
    parse_hex_list,
    parse_java_release,
    parse_signal,
)
from .patterns import BLANK_LINE, ERROR_SENTINEL

Extractor = Callable[[Role, re.Match, str], Dict[str, Any]]


# =========================================================================
# Value converters
# =========================================================================

_UNIT_ALTERNATION = "|".join(sorted((unit for unit in BYTE_UNITS if unit), key=len, reverse=True))
_SIZE_VALUE_RE = re.compile(rf"^\d+(?:[\.,]\d+)?\s?(?:{_UNIT_ALTERNATION})$")
_INTEGER_RE = re.compile(r"^-?\d+$")


def _size(text: Optional[str], unit: Optional[str] = None) -> Optional[ByteSize]:
    if text is None:
        return None
    if unit is not None:
        return ByteSize.from_parts(text, unit)
    return ByteSize.parse(text)


def _address(text: Optional[str]) -> Optional[HexAddress]:
    return HexAddress.parse(text) if text is not None else None


def _int(text: Optional[str], base: int = 10) -> Optional[int]:
    return int(text, base) if text is not None else None


def _decimal(text: Optional[str]) -> Optional[Decimal]:
    return Decimal(text.replace(",", ".")) if text is not None else None


def _scalar(text: Optional[str]) -> Any:
    """int for plain integers, ByteSize for sized quantities, str otherwise."""
    if text is None:
        return None
    text = text.strip()
    if _INTEGER_RE.match(text):
        return int(text)
    if _SIZE_VALUE_RE.match(text):
        return ByteSize.parse(text)
    return text


def _strings(match: re.Match) -> Dict[str, Any]:
    """Named groups as-is; unmatched groups stay None."""
    return dict(match.groupdict())


def _prefixed_addresses(text: str) -> Tuple[HexAddress, ...]:
    """Every ``0x`` literal in free text; bare digit runs are left alone."""
    return tuple(HexAddress.parse(token) for token in re.findall(r"0x[0-9a-fA-F]+", text))


def _range(text: str, arity: int) -> Tuple[HexAddress, ...]:
    addresses = parse_hex_list(text)
    if len(addresses) != arity:
        raise ValueError(f"Expected {arity} addresses, found {len(addresses)}")
    return addresses


# =========================================================================
# Ring buffers and heap rows
# =========================================================================

def _heap_row(match: re.Match) -> Dict[str, Any]:
    groups = match.groupdict()
    fields: Dict[str, Any] = {}
    for name in ("when", "generation", "space", "status"):
        if groups.get(name) is not None:
            fields[name] = groups[name].strip()
    for name in ("invocations", "full", "regions", "percent"):
        if groups.get(name) is not None:
            fields[name] = int(groups[name])
    for name in ("total", "committed", "used", "capacity", "region_size", "soft_max"):
        if name in groups:
            fields[name] = _size(groups[name])
    rest = groups.get("rest") or ""
    for name, value in re.findall(r"(capacity|committed|reserved|max capacity) (\d+(?:[\.,]\d)?[bBkKmMgG])", rest):
        fields.setdefault(name.replace(" ", "_"), _size(value))
    addresses = _prefixed_addresses(rest)
    if addresses:
        fields["addresses"] = addresses
    return fields


def _ring(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {"declared": int(match.group("declared"))}
    if match.re is RING_ROW:
        return {
            "timestamp": _decimal(match.group("timestamp")),
            "thread": _address(match.group("thread")),
            "message": match.group("message"),
        }
    if match.re is NO_EVENTS_ROW:
        return {"no_events": True}
    if "thrown" in match.groupdict():
        return {"thrown": match.group("thrown")}
    return _heap_row(match)


def _heap(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    return _heap_row(match)


# =========================================================================
# Key/value rows
# =========================================================================

def _key_value(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    fields = {name: _scalar(value) for name, value in groups.items() if name != "key"}
    if "key" in groups:
        fields["key"] = groups["key"].strip() if groups["key"] is not None else None
    return fields


def _metadata_bits(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    return {"key": match.group("key"), "mask": HexAddress.parse(match.group("value"))}


def _string_value(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return _strings(match)


def _single_number(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {"value": _int(match.groupdict().get("value"))}


def _meminfo(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    unit = match.group("unit")
    value = _size(match.group("value"), unit) if unit else int(match.group("value"))
    return {"key": match.group("key"), "value": value}


_MEMORY_HEADER_SIZES = ("physical", "physical_free", "swap", "swap_free")


def _memory(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        fields: Dict[str, Any] = {"page_size": _size(groups["page"], "K")}
        for name in _MEMORY_HEADER_SIZES:
            # Absent quantities stay None, never zero
            fields[name] = _size(groups[name])
        return fields
    if "total" in groups:
        return {"page_file_total": _size(groups["total"], "M"), "page_file_available": _size(groups["available"], "M")}
    fields = {"key": groups["key"], "value": groups["value"]}
    sizes = re.findall(r"(\d+(?:[\.,]\d)?[kKmMgG])", groups.get("rest") or "")
    if sizes:
        fields["size"] = _size(sizes[0])
        fields["peak"] = _size(sizes[1]) if len(sizes) > 1 else None
    return fields


_SIZE2_RE = re.compile(r"(\d+(?:[\.,]\d+)?) (KB|MB|GB)")
_PERCENT_RE = re.compile(r"\(\s*<?(\d{1,3})%\)")


def _metaspace(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    groups = match.groupdict()
    value = groups.get("value")
    fields: Dict[str, Any] = {"key": groups.get("key"), "value": value}
    if value:
        fields["sizes"] = [ByteSize.from_parts(number, unit) for number, unit in _SIZE2_RE.findall(value)]
        fields["percents"] = [int(percent) for percent in _PERCENT_RE.findall(value)]
    return fields


_NMT_PAIR_RE = re.compile(r"(\w+)=(\d+)(KB|MB|GB)?")


def _native_memory(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    groups = match.groupdict()
    value = groups.get("value") or ""
    fields: Dict[str, Any] = {"category": groups.get("category"), "value": value}
    amounts = {name: ByteSize.from_parts(number, unit) for name, number, unit in _NMT_PAIR_RE.findall(value) if unit}
    if amounts:
        fields["amounts"] = amounts
    return fields


_PROCESS_SIZE_RE = re.compile(r"(?:(\w+): )?(\d+[KMG])\b")


def _process_memory(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    value = match.group("value")
    fields: Dict[str, Any] = {"key": match.group("key"), "value": value}
    sizes = _PROCESS_SIZE_RE.findall(value)
    if sizes:
        fields["size"] = _size(sizes[0][1])
        for name, size in sizes[1:]:
            if name:
                fields[name] = _size(size)
    return fields


_CONTAINER_SIZE_KEYS = re.compile(r"bytes$")


def _container(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    key = match.group("key")
    value = _scalar(match.group("value"))
    if isinstance(value, int) and _CONTAINER_SIZE_KEYS.search(key) and value >= 0:
        value = ByteSize(value)
    return {"key": key, "value": value}


def _cpu(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER and "total" in groups:
        return {
            "cpus": int(groups["total"]),
            "active_cpus": _int(groups["active"]),
            "cores_per_cpu": _int(groups["cores"]),
            "threads_per_core": _int(groups["threads"]),
            "features": groups["features"].strip(" ,") or None,
        }
    return _key_value(role, match, line)


_FLAG_INT_TYPES = frozenset({"intx", "uintx", "uint", "uint64_t", "size_t", "int"})


def _global_flag(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    flag_type, raw = match.group("type"), match.group("value").strip()
    value: Any = raw
    if flag_type == "bool" and raw in ("true", "false"):
        value = raw == "true"
    elif flag_type in _FLAG_INT_TYPES and _INTEGER_RE.match(raw):
        value = int(raw)
    elif flag_type == "double" and re.match(r"^-?\d+(?:\.\d+)?$", raw):
        value = Decimal(raw)
    return {
        "type": flag_type,
        "name": match.group("name"),
        "value": value,
        "category": match.group("category"),
        "origin": match.group("origin"),
    }


def _vm_arguments(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    key, value = match.group("key"), match.group("value")
    fields: Dict[str, Any] = {"key": key, "value": value}
    if key == "jvm_args":
        fields["options"] = value.split()
    return fields


def _os(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if groups.get("key") is not None:
        text = f"{groups['key']}={groups['value']}"
        fields = {"key": groups["key"], "value": groups["value"].strip('"')}
    else:
        text = groups["text"]
        fields = {"text": text or None}
    fields["os"] = match_os(text) if text else match_os("")
    return fields


def _release_file(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    groups = match.groupdict()
    fields = {"key": groups.get("key"), "value": groups["value"]}
    if groups.get("key") == "JAVA_VERSION":
        fields["feature"] = parse_java_release(groups["value"])
    return fields


# =========================================================================
# Hex-range rows
# =========================================================================

_CODE_HEAP_SIZES = re.compile(rf"(\w+)=(\d+(?:[\.,]\d+)?)({_UNIT_ALTERNATION})?\b")
_COUNTS = re.compile(r"(\w+)=(\d+)")


def _code_cache(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        fields: Dict[str, Any] = {"heap": groups["heap"]}
        for name, number, unit in _CODE_HEAP_SIZES.findall(groups["value"]):
            fields[name] = ByteSize.from_parts(number, unit or "")
        return fields
    if "bounds" in groups:
        return {"bounds": _range(groups["bounds"], 3)}
    key, value = groups["key"], groups["value"]
    if key == "compilation":
        return {"key": key, "value": value.strip()}
    leading = re.match(r"\s*(\d+)", value)
    counts = {key: int(leading.group(1))} if leading else {}
    counts.update((name, int(number)) for name, number in _COUNTS.findall(value))
    return {"key": key, "counts": counts}


def _compiled_method(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {"compiler": match.group("compiler"), "method": match.group("rest").strip()}
    return {
        "key": match.group("key"),
        "range": (HexAddress.parse(match.group("start")), HexAddress.parse(match.group("end"))),
        "size": int(match.group("size")),
    }


def _marking_bits(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {"name": match.group("name"), "bitmaps": _prefixed_addresses(match.group("value"))}
    which = match.group("which")
    return {"which": which.strip() if which else None, "range": _range(match.group("range"), 2)}


def _class_info(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if "base" in groups:
        return {"narrow_klass_base": _address(groups["base"]), "narrow_klass_shift": int(groups["shift"])}
    fields = _strings(match)
    text = groups.get("value") or ""
    addresses = _prefixed_addresses(text)
    if addresses:
        fields["addresses"] = addresses
    if role is not Role.HEADER:
        return fields
    reserved = re.search(r"(?:reserved size|size): (\d+)", text) or re.match(r"^(\d+)", text)
    if reserved:
        fields["size"] = ByteSize(int(reserved.group(1)))
    return fields


def _card_table(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {
        "range": (HexAddress.parse(match.group("start")), HexAddress.parse(match.group("end"))),
        "base": HexAddress.parse(match.group("base")),
    }


def _cds_archive(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if match.group("not_mapped"):
        return {"mapped": False, "regions": ()}
    text = match.group("text")
    return {"mapped": True, "regions": _prefixed_addresses(text), "text": text}


def _zgc_page(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    return {
        "size": match.group("size"),
        "range": (HexAddress.parse(match.group("start")), HexAddress.parse(match.group("top")),
                  HexAddress.parse(match.group("end"))),
        "generation": match.group("generation"),
        "age": _int(match.group("age")),
        "state": match.group("state"),
    }


def _smr_info(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        return {}
    if "list" in groups:
        return {"list": groups["list"], "address": _address(groups["address"]), "length": int(groups["length"])}
    if "addresses" in groups:
        return {"addresses": parse_hex_list(groups["addresses"] or "")}
    if "elided" in groups:
        return {"elided": True}
    return {"key": groups["key"], "value": groups["value"]}


# =========================================================================
# Register rows
# =========================================================================

_REGISTER_PAIR_RE = re.compile(
    r"([A-Za-z][A-Za-z0-9]*(?:\[\d+\])?)\s*=\s*((?:0x)?[0-9a-fA-F]+)(?: ((?:0x)?[0-9a-fA-F]+)(?=[,\s]*$))?"
)


def _registers(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    registers: Dict[str, Any] = {}
    for name, value, upper in _REGISTER_PAIR_RE.findall(line):
        # XMM[n] rows print both 64-bit halves in source order
        registers[name.upper()] = (int(value, 16), int(upper, 16)) if upper else int(value, 16)
    return {"registers": registers}


def _register_mapping(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    groups = match.groupdict()
    fields = {"text": groups["text"].strip()}
    if groups.get("register") is not None:
        fields["register"] = groups["register"].upper()
        fields["value"] = _int(groups["value"], 16)
    return fields


def _stack_slot(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    groups = match.groupdict()
    fields = {"text": groups["text"].strip()}
    if groups.get("slot") is not None:
        fields["slot"] = int(groups["slot"])
        fields["value"] = int(groups["value"], 16)
    return fields


def _top_of_stack(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {"sp": HexAddress.parse(match.group("sp"))}
    return {
        "address": HexAddress.parse(match.group("address")),
        "values": [int(value, 16) for value in match.group("values").split()],
    }


def _instructions(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {"pc": HexAddress.parse(match.group("pc"))}
    return {"address": HexAddress.parse(match.group("address")), "bytes": match.group("bytes").split()}


# =========================================================================
# Stack-frame rows
# =========================================================================

FRAME_TYPES = {
    "J": "compiled",
    "A": "compiled",   # AOT
    "j": "interpreted",
    "V": "vm",
    "v": "vm_generated",
    "C": "native",
}

_NATIVE_FRAME_RE = re.compile(r"^\[(?P<library>[^\]+]+)(?:\+(?P<offset>0x[0-9a-fA-F]+))?\]\s*(?P<symbol>.*)$")
_COMPILED_FRAME_RE = re.compile(r"^(?:(?P<compile_id>\d+)\s+)?(?:(?P<compiler>c1|c2|jvmci)\s+)?(?P<method>\S+)")
_BARE_ADDRESS_RE = re.compile(r"^(?P<address>0x[0-9a-fA-F]+)\s*(?P<symbol>.*)$")


def _frame(tag: str, text: str) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"frame_type": FRAME_TYPES[tag], "library": None, "offset": None}
    native = _NATIVE_FRAME_RE.match(text)
    if native:
        fields["library"] = native.group("library")
        fields["offset"] = _int(native.group("offset"), 16)
        fields["symbol"] = native.group("symbol") or None
        return fields
    bare = _BARE_ADDRESS_RE.match(text)
    if bare:
        fields["address"] = HexAddress.parse(bare.group("address"))
        fields["symbol"] = bare.group("symbol") or None
        return fields
    if tag in ("J", "A"):
        compiled = _COMPILED_FRAME_RE.match(text)
        fields["compile_id"] = _int(compiled.group("compile_id"))
        fields["compiler"] = compiled.group("compiler")
        fields["symbol"] = compiled.group("method")
        return fields
    fields["symbol"] = text
    return fields


def _stack(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        if "frames" in groups:
            return {"frames": groups["frames"].lower(), "legend": groups["legend"] or None}
        return {
            "range": (HexAddress.parse(groups["start"]), HexAddress.parse(groups["end"])),
            "sp": _address(groups["sp"]),
            "free": _size(groups["free"], "K") if groups["free"] is not None else None,
        }
    if "tag" in groups:
        return _frame(groups["tag"], groups["text"])
    if groups["marker"] == "JavaThread":
        return {"marker": "thread_processed", "text": groups["text"]}
    return {"marker": "more_frames"}


# =========================================================================
# Threads
# =========================================================================

_THREAD_STATE_RE = re.compile(r"\[(?P<state>_thread_\w+)")
_THREAD_ID_RE = re.compile(r"\bid=(?P<id>\d+)")


def _thread_details(text: str) -> Dict[str, Any]:
    state = _THREAD_STATE_RE.search(text)
    thread_id = _THREAD_ID_RE.search(text)
    return {
        "state": state.group("state") if state else None,
        "id": int(thread_id.group("id")) if thread_id else None,
        "daemon": " daemon " in f" {text} ",
    }


def _threads(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        return {"group": "java" if groups["group"].startswith("Java") else "other"}
    if "total" in groups:
        return {"count": int(groups["total"])}
    fields = {
        "current": groups["marker"] == "=>",
        "address": HexAddress.parse(groups["address"]),
        "exited": groups["exited"] is not None,
        "thread_type": groups["type"],
        "name": groups["name"],
    }
    fields.update(_thread_details(groups["rest"]))
    return fields


_CURRENT_THREAD_RE = re.compile(r"^(?P<type>\w+)(?: \"(?P<name>[^\"]*)\")?")


def _current_thread(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    text = match.group("text")
    head = _CURRENT_THREAD_RE.match(text)
    fields = {
        "address": _address(match.group("address")),
        "thread_type": head.group("type") if head and match.group("address") else None,
        "name": head.group("name") if head else None,
        "native": text.startswith("is native thread"),
    }
    fields.update(_thread_details(text))
    return fields


def _compile_task(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    groups = match.groupdict()
    fields: Dict[str, Any] = {"compiler": groups["compiler"], "rest": groups["rest"].strip()}
    if "timestamp" in groups:
        fields["timestamp_ms"] = int(groups["timestamp"])
        fields["compile_id"] = int(groups["id"])
    else:
        fields["thread"] = int(groups["thread"])
    return fields


# =========================================================================
# Mapped files
# =========================================================================

def _dynamic_library(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        return {}
    if role is Role.FOOTER:
        return {"mappings": int(groups["mappings"])}
    if "error" in groups:
        return {"error": groups["error"], "pid": int(groups["pid"])}
    path = groups.get("path")
    if "region" in groups:
        region = groups["region"]
        if "-" in region:
            start, end = region.split("-")
            addresses: Tuple[HexAddress, ...] = (HexAddress.parse(start), HexAddress.parse(end))
        else:
            addresses = (HexAddress.parse(region),)
        device = groups["device"]
        return {
            "range": addresses,
            "permission": groups["permission"],
            "offset": _int(groups["offset"], 16),
            "device": device,
            "inode": _int(groups["inode"]),
            "path": path,
            "storage": classify_device(device, path),
        }
    return {
        "range": (HexAddress.parse(groups["start"]), HexAddress.parse(groups["end"])),
        "permission": None,
        "offset": None,
        "device": None,
        "inode": None,
        "path": path,
        "storage": classify_device(None, path),
    }


def _ld_preload(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    return {"path": match.group("path")}


# =========================================================================
# Signals
# =========================================================================

def _siginfo(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    text = match.group("text")
    return {"text": text, "signal": parse_signal(text)}


_HANDLER_FLAG_SEPARATOR = "|"


def _signal_handler(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    if role is Role.HEADER:
        return {}
    groups = match.groupdict()
    if "note" in groups:
        return {"note": groups["note"]}
    flags = groups["flags"]
    return {
        "signal": groups["signal"],
        "handler": groups["handler"].strip(),
        "mask": groups["mask"],
        "flags": flags.split(_HANDLER_FLAG_SEPARATOR) if flags and flags != "none" else [],
    }


# =========================================================================
# Banner ("#") lines
# =========================================================================

# Each tuple: (compiled_regex, subtype, example)
# Order matters: banner lines with fixed wording before the frame line.
HEADER_SUBTYPES = [
    (re.compile(r"^#\s*(?P<text>A fatal error has been detected by the Java Runtime Environment:?)\s*$"),
     "banner", "# A fatal error has been detected by the Java Runtime Environment:"),
    (re.compile(r"^#\s+(?P<name>SIG\w+|EXCEPTION_\w+) \((?P<code>0x[0-9a-fA-F]+)\) at pc=(?P<pc>0x[0-9a-fA-F]+)"
                r"(?:, pid=(?P<pid>\d+), tid=(?P<tid>(?:0x)?[0-9a-fA-F]+))?"),
     "signal", "#  SIGSEGV (0xb) at pc=0x00007fcbd05a3b71, pid=52385, tid=0x00007fcbcc677700"),
    (re.compile(r"^#\s+Internal Error \((?P<location>[^)]*)\)(?:, pid=(?P<pid>\d+), tid=(?P<tid>\S+))?"),
     "internal_error", "#  Internal Error (ciEnv.hpp:172), pid=6570, tid=0x00007fe3d7dfd700"),
    (re.compile(r"^#\s+(?P<text>(?:There is insufficient memory|Native memory allocation|"
                r"Out of Memory Error).*)$"),
     "native_oom", "# There is insufficient memory for the Java Runtime Environment to continue."),
    (re.compile(r"^# JRE version: (?P<text>.*?)(?: \(build (?P<build>[^)]+)\))?\s*$"),
     "jre_version", "# JRE version: Java(TM) SE Runtime Environment (8.0_192-b12) (build 1.8.0_192-b12)"),
    (re.compile(r"^# Java VM: (?P<text>.*)$"),
     "java_vm", "# Java VM: Java HotSpot(TM) 64-Bit Server VM (25.192-b12 mixed mode linux-amd64 compressed oops)"),
    (re.compile(r"^# (?P<tag>[CjJAvV])\s{1,2}(?P<frame>\S.*)$"),
     "problematic_frame", "# V  [libjvm.so+0x645b71]  oopDesc::size_given_klass(Klass*)+0x1"),
]

_NATIVE_OOM_BYTES_RE = re.compile(r"failed to (?:allocate|map) (\d+) bytes")


def _header(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    for regex, subtype, _ in HEADER_SUBTYPES:
        sub = regex.match(line)
        if not sub:
            continue
        groups = sub.groupdict()
        fields: Dict[str, Any] = {"subtype": subtype}
        if subtype == "signal":
            fields["signal"] = parse_banner_signal(groups["name"], groups["code"], groups["pc"])
            fields["pid"] = _int(groups["pid"])
            fields["tid"] = groups["tid"]
        elif subtype == "internal_error":
            fields.update(location=groups["location"], pid=_int(groups["pid"]), tid=groups["tid"])
        elif subtype == "native_oom":
            requested = _NATIVE_OOM_BYTES_RE.search(groups["text"])
            fields["text"] = groups["text"]
            fields["requested"] = ByteSize(int(requested.group(1))) if requested else None
        elif subtype == "jre_version":
            build = groups["build"]
            fields.update(text=groups["text"], build=build,
                          feature=parse_java_release(build) if build else None)
        elif subtype == "problematic_frame":
            fields.update(_frame(groups["tag"], groups["frame"]))
        else:
            fields["text"] = groups["text"]
        return fields
    text = match.group("text").strip()
    return {"subtype": "text", "text": text or None}


def _heading(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    title = match.group("title")
    return {"title": title.replace(" ", "") if title else None}


# =========================================================================
# Free-text-tail rows
# =========================================================================

# Launcher options that consume the following token
_OPTIONS_WITH_ARGUMENT = frozenset({"-cp", "-classpath", "--class-path", "-p", "--module-path",
                                    "--add-modules", "--add-opens", "--add-exports"})


def split_command_line(text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a java launcher command line into options and invocation.

    Leading ``-`` tokens (plus the argument of options such as ``-cp``) are
    options; everything from the first other token on is the invocation.

    Returns:
        (options, invocation), each None when that segment is absent
    """
    tokens = text.split() if text else []
    position = 0
    while position < len(tokens) and tokens[position].startswith("-"):
        if tokens[position] in _OPTIONS_WITH_ARGUMENT:
            position += 1
        position += 1
        if tokens[position - 1:position] == ["-jar"]:
            break
    options = " ".join(tokens[:position]) or None
    invocation = " ".join(tokens[position:]) or None
    return options, invocation


def _command_line(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    options, invocation = split_command_line(match.group("text"))
    return {"options": options, "invocation": invocation}


# =========================================================================
# Standalone facts
# =========================================================================

def _elapsed(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    fields = {"seconds": _decimal(groups["seconds"]), "breakdown": groups["breakdown"]}
    if "time" in groups:
        fields["time"] = groups["time"]
    return fields


def _heap_address(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    rest = match.group("rest") or ""
    mode = re.search(r"Compressed Oops mode: ([^,]+)", rest)
    shift = re.search(r"Oop shift amount: (\d+)", rest)
    return {
        "address": HexAddress.parse(match.group("address")),
        "size": _size(match.group("size"), "M"),
        "compressed_oops_mode": mode.group(1).strip() if mode else None,
        "oop_shift": int(shift.group(1)) if shift else None,
    }


_HOST_RE = re.compile(r"^(?P<cpu>.+?), (?P<cores>\d+) cores, (?P<memory>\d+(?:[\.,]\d)?[KMGT]), ?(?P<os>.+?)\s*$")


def _host(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    text = match.group("text")
    host = _HOST_RE.match(text)
    if not host:
        return {"text": text or None, "cpu": None, "cores": None, "memory": None, "os": match_os(text)}
    return {
        "text": text,
        "cpu": host.group("cpu"),
        "cores": int(host.group("cores")),
        "memory": _size(host.group("memory")),
        "os": match_os(host.group("os")),
    }


def _libc(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {"name": match.group("name"), "version": match.group("version"), "rest": match.group("rest").strip() or None}


def _load_average(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {"loads": [Decimal(value) for value in re.findall(r"\d+\.\d+", match.group("text"))]}


_UPTIME_RE = re.compile(r"(?P<days>\d+) days? (?P<hours>\d+):(?P<minutes>\d{2}) hours")


def _os_uptime(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    text = match.group("text")
    uptime = _UPTIME_RE.search(text)
    seconds = None
    if uptime:
        seconds = ((int(uptime.group("days")) * 24 + int(uptime.group("hours"))) * 60
                   + int(uptime.group("minutes"))) * 60
    return {"text": text, "seconds": seconds}


_RLIMIT_RE = re.compile(r"([A-Z]+) ([\w/]+)")


def _rlimit(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {"limits": dict(_RLIMIT_RE.findall(match.group("text")))}


def _jvmti_agents(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    text = match.group("text")
    agents = [] if not text or text == "none" else [agent.strip() for agent in text.split(",")]
    return {"agents": agents}


_BUILD_PARENS_RE = re.compile(r"\(([^)]*)\)")


def _vm_info(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    builds = _BUILD_PARENS_RE.findall(match.group("builds"))
    release = builds[-1]
    return {
        "vm": match.group("vm"),
        "vm_version": match.group("vm_version"),
        "os": match.group("os"),
        "arch": parse_arch(match.group("arch")),
        "arch_token": match.group("arch"),
        "release": release,
        "feature": parse_java_release(release),
        "vendor_builds": builds[:-1],
        "built": match.group("built"),
        "builder": match.group("builder"),
        "compiler": match.group("compiler"),
    }


def _vm_operation(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    rest = match.group("rest")
    mode = re.search(r"mode: (\w+)", rest)
    requester = re.search(r"requested by thread (0x[0-9a-fA-F]+)", rest)
    return {
        "address": HexAddress.parse(match.group("address")),
        "operation": match.group("operation"),
        "mode": mode.group(1) if mode else None,
        "requested_by": _address(requester.group(1)) if requester else None,
    }


def _vm_mutex(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        text = groups["text"]
        return {"owned": None if text == "None" else text or None}
    return {"address": HexAddress.parse(groups["address"]), "name": groups["name"], "owner": _address(groups["owner"])}


def _uname(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    text = match.group("text")
    if role is Role.BODY:
        return {"text": text}
    tokens = text.split()
    arch = next((parse_arch(token) for token in reversed(tokens) if parse_arch(token)), None)
    return {"system": tokens[0], "release": tokens[1] if len(tokens) > 1 else None, "arch": arch, "text": text}


def _hugepage(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    fields: Dict[str, Any] = {}
    if role is Role.HEADER:
        fields["setting"] = groups["setting"]
    value = groups.get("value")
    if value is None:
        return fields
    selected = re.search(r"\[([\w+\-]+)\]", value)
    if selected:
        fields["selected"] = selected.group(1)
        fields["options"] = [option.strip("[]") for option in value.split()]
    elif _INTEGER_RE.match(value):
        fields["value"] = int(value)
    else:
        fields["value"] = value
    return fields


def _virtualization(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    groups = match.groupdict()
    if role is Role.HEADER:
        return {"hypervisor": groups["hypervisor"], "text": groups["text"]}
    if "key" in groups:
        return {"key": groups["key"], "value": _scalar(groups["value"])}
    return {"text": groups["text"]}


def _timeout(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    total = match.group("total")
    return {
        "step": match.group("step"),
        "seconds": _int(match.group("seconds") or total),
        "final": total is not None,
    }


def _address_only(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {"address": HexAddress.parse(match.group("address"))}


def _pid(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {"pid": int(match.group("pid"))}


def _no_fields(role: Role, match: Optional[re.Match], line: str) -> Dict[str, Any]:
    return {}


def _sentinel(role: Role, match: re.Match, line: str) -> Dict[str, Any]:
    return {"step": match.group("step"), "id": _int(match.group("id"), 16)}


# =========================================================================
# Builder table
# =========================================================================

BUILDERS: Dict[EventKind, Extractor] = {kind: _ring for kind in RING_BUFFER_KINDS}
BUILDERS.update({
    EventKind.ACTIVE_LOCALE: _key_value,
    EventKind.CLASS_INFO: _class_info,
    EventKind.CODE_CACHE: _code_cache,
    EventKind.COMPILED_METHOD: _compiled_method,
    EventKind.CONTAINER_INFO: _container,
    EventKind.CPU_INFO: _cpu,
    EventKind.CURRENT_COMPILE_TASK: _compile_task,
    EventKind.DYNAMIC_LIBRARIES: _dynamic_library,
    EventKind.ENVIRONMENT_VARIABLES: _string_value,
    EventKind.EXCEPTION_COUNTS: _key_value,
    EventKind.GC_PRECIOUS_LOG: _string_value,
    EventKind.GLOBAL_FLAGS: _global_flag,
    EventKind.HEAP: _heap,
    EventKind.HEAP_REGIONS: _string_value,
    EventKind.INSTRUCTIONS: _instructions,
    EventKind.INTERNAL_STATISTICS: _key_value,
    EventKind.LD_PRELOAD_FILE: _ld_preload,
    EventKind.LOCK_STACK: _key_value,
    EventKind.LOGGING: _key_value,
    EventKind.MACH_CODE: _string_value,
    EventKind.MARKING_BITS: _marking_bits,
    EventKind.MAX_MAP_COUNT: _single_number,
    EventKind.MEMINFO: _meminfo,
    EventKind.MEMORY: _memory,
    EventKind.METASPACE: _metaspace,
    EventKind.NATIVE_MEMORY_TRACKING: _native_memory,
    EventKind.OS: _os,
    EventKind.PID_MAX: _single_number,
    EventKind.PROCESS_MEMORY: _process_memory,
    EventKind.REGISTERS: _registers,
    EventKind.REGISTER_TO_MEMORY_MAPPING: _register_mapping,
    EventKind.RELEASE_FILE: _release_file,
    EventKind.SIGNAL_HANDLERS: _signal_handler,
    EventKind.STACK: _stack,
    EventKind.STACK_SLOT_TO_MEMORY_MAPPING: _stack_slot,
    EventKind.THREADS: _threads,
    EventKind.THREADS_ACTIVE_COMPILE: _compile_task,
    EventKind.THREADS_CLASS_SMR_INFO: _smr_info,
    EventKind.THREADS_MAX: _single_number,
    EventKind.TOP_OF_STACK: _top_of_stack,
    EventKind.TRANSPARENT_HUGEPAGE: _hugepage,
    EventKind.UNAME: _uname,
    EventKind.VIRTUALIZATION_INFO: _virtualization,
    EventKind.VM_ARGUMENTS: _vm_arguments,
    EventKind.VM_MUTEX: _vm_mutex,
    EventKind.ZGC_GLOBALS: _key_value,
    EventKind.ZGC_METADATA_BITS: _metadata_bits,
    EventKind.ZGC_PAGE_TABLE: _zgc_page,
    # Standalone facts
    EventKind.HEADER: _header,
    EventKind.HEADING: _heading,
    EventKind.BARRIER_SET: _string_value,
    EventKind.CARD_TABLE: _card_table,
    EventKind.CDS_ARCHIVE: _cds_archive,
    EventKind.COMMAND_LINE: _command_line,
    EventKind.CURRENT_THREAD: _current_thread,
    EventKind.DECODING_CODE_BLOB: _string_value,
    EventKind.ELAPSED_TIME: _elapsed,
    EventKind.HEAP_ADDRESS: _heap_address,
    EventKind.HOST: _host,
    EventKind.JVMTI_AGENTS: _jvmti_agents,
    EventKind.LIBC: _libc,
    EventKind.LOAD_AVERAGE: _load_average,
    EventKind.NATIVE_DECODER_STATE: _string_value,
    EventKind.OS_UPTIME: _os_uptime,
    EventKind.PID: _pid,
    EventKind.POLLING_PAGE: _address_only,
    EventKind.RLIMIT: _rlimit,
    EventKind.SIGINFO: _siginfo,
    EventKind.TIME: _string_value,
    EventKind.TIME_ELAPSED_TIME: _elapsed,
    EventKind.TIMEOUT: _timeout,
    EventKind.TIMEZONE: _string_value,
    EventKind.VM_INFO: _vm_info,
    EventKind.VM_OPERATION: _vm_operation,
    EventKind.VM_STATE: _string_value,
    # Throwaway
    EventKind.BLANK_LINE: _no_fields,
    EventKind.END: _no_fields,
    EventKind.END_BRACE: _no_fields,
    EventKind.NUMBER: _single_number,
    # Special
    EventKind.REPORT_ABORTED: _sentinel,
    EventKind.UNKNOWN: _no_fields,
})

_MISSING_BUILDERS = set(EventKind) - set(BUILDERS)
if _MISSING_BUILDERS:
    raise RuntimeError(f"Event kinds without a builder: {sorted(kind.name for kind in _MISSING_BUILDERS)}")


# =========================================================================
# Entry point
# =========================================================================

def _locate_in_section(grammar: SectionGrammar, line: str) -> Tuple[Optional[Role], Optional[re.Match]]:
    match = grammar.match_header(line)
    if match:
        return Role.HEADER, match
    match = grammar.match_footer(line)
    if match:
        return Role.FOOTER, match
    match = grammar.match_body(line)
    if match:
        return Role.BODY, match
    if grammar.allows_blank and BLANK_LINE.match(line):
        return Role.BODY, None
    if grammar.braces and line.strip() == "}":
        return Role.BODY, None
    return None, None


def build(kind: EventKind, line: str) -> Event:
    """
    Build the event for a line already classified as ``kind``.

    Args:
        kind: the kind returned by the classifier for this line
        line: the raw line

    Returns:
        Event with role and typed fields

    Raises:
        GrammarDefectError: If no row of the kind's grammar accepts the line
    """
    if kind is EventKind.UNKNOWN:
        return Event(kind, line, Role.UNKNOWN)

    sentinel = ERROR_SENTINEL.match(line)
    if kind is EventKind.REPORT_ABORTED:
        if not sentinel:
            raise GrammarDefectError(kind, line, "not an error-reporting sentinel")
        return Event(kind, line, Role.STANDALONE, BUILDERS[kind](Role.STANDALONE, sentinel, line), truncated=True)

    grammar = GRAMMARS[kind]
    if isinstance(grammar, SectionGrammar):
        if sentinel:
            return Event(kind, line, Role.BODY, BUILDERS[EventKind.REPORT_ABORTED](Role.BODY, sentinel, line),
                         truncated=True)
        role, match = _locate_in_section(grammar, line)
    else:
        role, match = grammar.role, grammar.match_header(line)
        if match is None:
            role = None

    if role is None:
        raise GrammarDefectError(kind, line, "no grammar row accepts the line")
    if match is None:
        return Event(kind, line, role)

    try:
        fields = BUILDERS[kind](role, match, line)
    except (ValueError, AttributeError, IndexError, KeyError) as e:
        raise GrammarDefectError(kind, line, str(e)) from e
    return Event(kind, line, role, fields)
