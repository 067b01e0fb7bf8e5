#!python3
"""
Line classification for JVM fatal error logs.

A line is classified against the section state that precedes it:
1. Continuation of the open section (body row, footer, interior blank line,
   closing brace while braces are open)
2. Mid-report error sentinel, attributed to the open section
3. First header or standalone grammar in the audited order
4. UNKNOWN
"""

from typing import Iterable, Optional, Sequence

from .grammar import HEADER_ORDER, Grammar
from .kinds import EventKind
from .patterns import ERROR_SENTINEL
from .state import CLOSED, SectionState


class LineClassifier:
    """
    Maps a line plus the current section state to an event kind.

    The classifier is pure: it keeps no per-document state and never raises
    for text input. Lines no grammar accepts become UNKNOWN.

    Usage:
        classifier = LineClassifier()
        kind = classifier.classify("Registers:", CLOSED)    # EventKind.REGISTERS
    """

    def __init__(self, order: Optional[Sequence[Grammar]] = None):
        """
        Initialize LineClassifier.

        Args:
            order: header grammars in priority order (defaults to HEADER_ORDER)
        """
        self.order = tuple(order) if order is not None else HEADER_ORDER

    def classify(self, line: str, state: SectionState = CLOSED) -> EventKind:
        """
        Classify one line.

        Args:
            line: the raw line, without its line terminator
            state: section state in effect before this line

        Returns:
            EventKind of the line
        """
        grammar = state.grammar
        if grammar is not None and grammar.continues(line, state.depth):
            return grammar.kind

        if ERROR_SENTINEL.match(line):
            return state.open_kind if state.open_kind is not None else EventKind.REPORT_ABORTED

        match = self.first_declared_match(line)
        if match is not None:
            return match.kind

        return EventKind.UNKNOWN

    def first_declared_match(self, line: str) -> Optional[Grammar]:
        """Return the first grammar in declaration order whose header accepts ``line``."""
        for grammar in self.order:
            if grammar.is_header(line):
                return grammar
        return None

    def candidates(self, line: str) -> Iterable[Grammar]:
        """All grammars whose header accepts ``line``, in declaration order."""
        return [grammar for grammar in self.order if grammar.is_header(line)]


_DEFAULT_CLASSIFIER = LineClassifier()


def classify(line: str, state: SectionState = CLOSED) -> EventKind:
    """Classify ``line`` with the default header order."""
    return _DEFAULT_CLASSIFIER.classify(line, state)
