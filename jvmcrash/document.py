#!python3
"""
Parsed document and the crash facts gathered from it.

A Document holds one Event per input line, in input order. While the events
stream past, a FactCollector distils the handful of values most callers want
without walking the event list themselves (OS, architecture, Java release,
signal, pid, timing and command line).
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set

from .events import Event, _plain
from .kinds import EventKind, Role
from .normalizers import Arch, OsFingerprint, SignalDescriptor, parse_arch, parse_java_release


@dataclass
class DocumentFacts:
    """Headline facts about one crash; values the log never states stay None."""

    os: OsFingerprint = field(default_factory=OsFingerprint)
    arch: Optional[Arch] = None
    java_release: Optional[str] = None
    java_feature: Optional[int] = None
    signal: Optional[SignalDescriptor] = None
    pid: Optional[int] = None
    elapsed_seconds: Optional[Decimal] = None
    crash_time: Optional[str] = None
    timezone: Optional[str] = None
    command_line_options: Optional[str] = None
    command_line_invocation: Optional[str] = None
    java_command: Optional[str] = None
    truncated_kinds: Set[EventKind] = field(default_factory=set)
    unknown_lines: int = 0

    def to_dict(self) -> dict:
        return {
            "os": self.os.to_dict(),
            "arch": self.arch.value if self.arch else None,
            "java_release": self.java_release,
            "java_feature": self.java_feature,
            "signal": self.signal.to_dict() if self.signal else None,
            "pid": self.pid,
            "elapsed_seconds": _plain(self.elapsed_seconds),
            "crash_time": self.crash_time,
            "timezone": self.timezone,
            "command_line_options": self.command_line_options,
            "command_line_invocation": self.command_line_invocation,
            "java_command": self.java_command,
            "truncated_kinds": sorted(kind.value for kind in self.truncated_kinds),
            "unknown_lines": self.unknown_lines,
        }


class FactCollector:
    """
    Folds events into a DocumentFacts as they are produced.

    The first statement of a fact wins, except where a more specific source
    exists: a ``siginfo`` row replaces the banner signal, and OS fingerprints
    from OS rows are merged with the ones from release-file rows.

    Usage:
        collector = FactCollector()
        for event in events:
            collector.add(event)
        facts = collector.facts
    """

    def __init__(self):
        self.facts = DocumentFacts()
        self._signal_from_siginfo = False

    def add(self, event: Event) -> None:
        facts = self.facts
        if event.is_unknown:
            facts.unknown_lines += 1
            return
        if event.truncated:
            facts.truncated_kinds.add(event.kind)
        handler = getattr(self, f"_on_{event.kind.value}", None)
        if handler is not None and not event.truncated:
            handler(event.fields, event.role)

    def add_all(self, events: Iterable[Event]) -> DocumentFacts:
        for event in events:
            self.add(event)
        return self.facts

    # ---- per-kind handlers ----

    def _merge_os(self, fingerprint: Optional[OsFingerprint]) -> None:
        if fingerprint is not None and not fingerprint.is_empty:
            self.facts.os = self.facts.os.merge(fingerprint)

    def _on_os(self, fields: Dict[str, Any], role: Role) -> None:
        self._merge_os(fields.get("os"))

    def _on_host(self, fields: Dict[str, Any], role: Role) -> None:
        self._merge_os(fields.get("os"))

    def _on_release_file(self, fields: Dict[str, Any], role: Role) -> None:
        key, value = fields.get("key"), fields.get("value")
        if key == "JAVA_VERSION" and self.facts.java_release is None:
            self.facts.java_release = value
            self.facts.java_feature = fields.get("feature")
        elif key == "OS_ARCH" and self.facts.arch is None and value:
            self.facts.arch = parse_arch(value)

    def _on_vm_info(self, fields: Dict[str, Any], role: Role) -> None:
        if fields.get("arch") is not None:
            self.facts.arch = fields["arch"]
        if fields.get("release"):
            self.facts.java_release = fields["release"]
            self.facts.java_feature = fields.get("feature")

    def _on_uname(self, fields: Dict[str, Any], role: Role) -> None:
        if self.facts.arch is None and fields.get("arch") is not None:
            self.facts.arch = fields["arch"]

    def _on_header(self, fields: Dict[str, Any], role: Role) -> None:
        subtype = fields.get("subtype")
        if subtype == "signal":
            if not self._signal_from_siginfo:
                self.facts.signal = fields["signal"]
            if self.facts.pid is None:
                self.facts.pid = fields.get("pid")
        elif subtype == "internal_error" and self.facts.pid is None:
            self.facts.pid = fields.get("pid")
        elif subtype == "jre_version" and self.facts.java_release is None and fields.get("build"):
            self.facts.java_release = fields["build"]
            self.facts.java_feature = parse_java_release(fields["build"])

    def _on_siginfo(self, fields: Dict[str, Any], role: Role) -> None:
        if not self._signal_from_siginfo:
            self.facts.signal = fields["signal"]
            self._signal_from_siginfo = True

    def _on_pid(self, fields: Dict[str, Any], role: Role) -> None:
        if self.facts.pid is None:
            self.facts.pid = fields["pid"]

    def _on_elapsed_time(self, fields: Dict[str, Any], role: Role) -> None:
        if self.facts.elapsed_seconds is None:
            self.facts.elapsed_seconds = fields["seconds"]

    def _on_time_elapsed_time(self, fields: Dict[str, Any], role: Role) -> None:
        self._on_elapsed_time(fields, role)
        if self.facts.crash_time is None:
            self.facts.crash_time = fields.get("time")

    def _on_time(self, fields: Dict[str, Any], role: Role) -> None:
        if self.facts.crash_time is None:
            self.facts.crash_time = fields["time"]

    def _on_timezone(self, fields: Dict[str, Any], role: Role) -> None:
        if self.facts.timezone is None:
            self.facts.timezone = fields["timezone"]

    def _on_command_line(self, fields: Dict[str, Any], role: Role) -> None:
        if self.facts.command_line_options is None and self.facts.command_line_invocation is None:
            self.facts.command_line_options = fields["options"]
            self.facts.command_line_invocation = fields["invocation"]

    def _on_vm_arguments(self, fields: Dict[str, Any], role: Role) -> None:
        if fields.get("key") == "java_command" and self.facts.java_command is None:
            self.facts.java_command = fields["value"] or None


@dataclass
class Document:
    """All events of one fatal error log, one per input line."""

    events: List[Event] = field(default_factory=list)
    facts: DocumentFacts = field(default_factory=DocumentFacts)
    source: Optional[str] = None

    def __len__(self) -> int:
        return len(self.events)

    def events_of(self, kind: EventKind) -> List[Event]:
        return [event for event in self.events if event.kind is kind]

    def unknown_events(self) -> List[Event]:
        return [event for event in self.events if event.is_unknown]

    def truncated_events(self) -> List[Event]:
        return [event for event in self.events if event.truncated]

    def kind_counts(self) -> Counter:
        """Number of events per kind."""
        return Counter(event.kind for event in self.events)

    def to_dict(self, drop_throwaway: bool = False) -> dict:
        """
        JSON-ready representation of the document.

        Args:
            drop_throwaway: leave throwaway events out of the ``events`` list

        Returns:
            dict with ``source``, ``facts``, ``line_count`` and ``events``
        """
        events = [event for event in self.events if not (drop_throwaway and event.is_throwaway)]
        return {
            "source": self.source,
            "line_count": len(self.events),
            "facts": self.facts.to_dict(),
            "events": [event.to_dict() for event in events],
        }
