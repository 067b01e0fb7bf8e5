#!python3
"""
Single-pass document assembly.

DocumentAssembler walks the lines of one fatal error log in order, threading
the section state through classify -> build -> advance:
- every line yields exactly one event, in input order
- grammar defects are re-raised in strict mode, otherwise logged and the line
  is kept as UNKNOWN
- the optional line hash is an xxHash64 digest of the raw line
"""

import logging
from dataclasses import replace
from typing import Generator, Iterable, Optional

import xxhash

from .builders import build
from .classifier import LineClassifier
from .config import ParserConfig
from .document import Document, FactCollector
from .events import Event, GrammarDefectError, RawLine
from .kinds import EventKind, Role
from .state import CLOSED, SectionState, advance


class DocumentAssembler:
    """
    Turns a sequence of lines into a Document.

    Usage:
        assembler = DocumentAssembler(ParserConfig(strict=True))
        document = assembler.parse(lines)
    """

    def __init__(self, config: Optional[ParserConfig] = None, *, classifier: Optional[LineClassifier] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize DocumentAssembler.

        Args:
            config: ParserConfig (defaults apply when omitted)
            classifier: LineClassifier to use (default header order when omitted)
            logger: Logger instance (creates default if None)
        """
        self.config = config or ParserConfig()
        self.classifier = classifier or LineClassifier()
        self.logger = logger or logging.getLogger(__name__)
        self.defects = 0

    def _event_for(self, raw: RawLine, state: SectionState) -> Event:
        index, line = raw
        kind = self.classifier.classify(line, state)
        try:
            event = build(kind, line)
        except GrammarDefectError as e:
            if self.config.strict:
                raise
            self.defects += 1
            self.logger.warning(f"[!] Line {index + 1}: {e}")
            event = Event(EventKind.UNKNOWN, line, Role.UNKNOWN)
        line_hash = xxhash.xxh64_hexdigest(line.encode("utf-8", "surrogateescape")) if self.config.hashes else None
        return replace(event, index=index, line_hash=line_hash)

    def iter_events(self, lines: Iterable[str]) -> Generator[Event, None, None]:
        """
        Yield one event per line, in order.

        Args:
            lines: raw lines without line terminators

        Yields:
            Event for each line
        """
        state = CLOSED
        for index, line in enumerate(lines):
            event = self._event_for(RawLine(index, line), state)
            state = advance(state, event)
            yield event

    def parse(self, lines: Iterable[str], source: Optional[str] = None) -> Document:
        """
        Parse a whole log.

        Args:
            lines: raw lines without line terminators
            source: name of the file the lines came from, if any

        Returns:
            Document with one event per line and its collected facts
        """
        self.defects = 0
        collector = FactCollector()
        events = []
        for event in self.iter_events(lines):
            collector.add(event)
            events.append(event)
        if self.defects:
            self.logger.debug(f"{self.defects} line(s) degraded to UNKNOWN after grammar defects")
        return Document(events=events, facts=collector.facts, source=source)


def parse_document(lines: Iterable[str], config: Optional[ParserConfig] = None,
                   logger: Optional[logging.Logger] = None, source: Optional[str] = None) -> Document:
    """Parse ``lines`` into a Document with a fresh DocumentAssembler."""
    return DocumentAssembler(config, logger=logger).parse(lines, source=source)
