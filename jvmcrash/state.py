#!python3
"""
Section state carried from one line to the next.
"""

from dataclasses import dataclass, replace
from typing import Optional

from .events import Event
from .grammar import GRAMMARS, NO_EVENTS_ROW, SectionGrammar
from .kinds import EventKind, Role
from .patterns import brace_delta

# Kinds that never close the open section
_TRANSPARENT_KINDS = frozenset({EventKind.UNKNOWN, EventKind.NUMBER, EventKind.END_BRACE})


@dataclass(frozen=True)
class SectionState:
    """Which section is open and how far into it the document is."""

    open_kind: Optional[EventKind] = None
    # Curly brace nesting inside the open section
    depth: int = 0
    # Row count printed in a ring buffer header (informational only)
    declared: Optional[int] = None
    # Body rows seen since the header
    seen: int = 0

    @property
    def is_open(self) -> bool:
        return self.open_kind is not None

    @property
    def grammar(self) -> Optional[SectionGrammar]:
        if self.open_kind is None:
            return None
        return GRAMMARS[self.open_kind]


CLOSED = SectionState()


def _depth_after(grammar: SectionGrammar, depth: int, text: str) -> int:
    if not grammar.braces:
        return 0
    return max(0, depth + brace_delta(text))


def advance(state: SectionState, event: Event) -> SectionState:
    """Return the state that follows ``event``.

    Args:
        state: state in effect when the event's line was classified
        event: the built event

    Returns:
        SectionState: the new state; ``state`` itself is never mutated
    """
    kind, role = event.kind, event.role

    if role is Role.HEADER:
        grammar = GRAMMARS[kind]
        return SectionState(
            open_kind=kind,
            depth=_depth_after(grammar, 0, event.text),
            declared=event.fields.get("declared"),
            seen=0,
        )

    if state.open_kind is not None and kind is state.open_kind:
        if role is Role.FOOTER:
            return CLOSED
        if event.truncated:
            return state
        if NO_EVENTS_ROW.match(event.text) and state.seen == 0:
            return CLOSED
        return replace(
            state,
            depth=_depth_after(state.grammar, state.depth, event.text),
            seen=state.seen + 1,
        )

    if kind in _TRANSPARENT_KINDS or event.truncated:
        return state

    return CLOSED
