#!python3
"""
Rich-based console output for jvmcrash.

This module provides styled terminal output using the Rich library:
- Console output with colors and formatting
- Crash facts panel and per-kind event counts
- Summary dashboard at the end of a run
- Rich logger factory used by the command-line tool
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

from .document import Document
from .kinds import EventKind

# Custom jvmcrash theme
JVMCRASH_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "file": "cyan",
    "count": "bold magenta",
    "time": "yellow",
    "header": "bold cyan",
    "kind.unknown": "bold yellow",
    "kind.truncated": "bold red",
    "kind.throwaway": "dim",
    "stat.label": "dim",
    "stat.value": "bold cyan",
})

# Global console instance for consistent output
console = Console(theme=JVMCRASH_THEME, highlight=False)


# ============================================================================
# QUIET MODE SUPPORT
# ============================================================================

_quiet_mode: bool = False


def set_quiet_mode(quiet: bool = True):
    """Enable/disable quiet mode globally.

    When quiet mode is active, non-essential output (banner, progress info,
    facts and kind tables) is suppressed. Errors and warnings still display.
    """
    global _quiet_mode
    _quiet_mode = quiet


def is_quiet() -> bool:
    """Check if quiet mode is active."""
    return _quiet_mode


# ============================================================================
# BANNER
# ============================================================================

_BANNER = """\
[bold cyan]   _                                 _[/]
[cyan]  (_)_   ___ __ ___   ___ _ __ __ _ ___| |__[/]
[bold blue]  | \\ \\ / / '_ ` _ \\ / __| '__/ _` / __| '_ \\[/]
[blue]  | |\\ V /| | | | | | (__| | | (_| \\__ \\ | | |[/]
[bold magenta] _/ | \\_/ |_| |_| |_|\\___|_|  \\__,_|___/_| |_|[/]
[magenta]|__/[/]
[dim]-= JVM fatal error log parser =-[/]"""


def print_banner(version: str):
    """Print the jvmcrash banner with version number."""
    if _quiet_mode:
        return
    console.print()
    console.print(_BANNER)
    console.print(f"                    [dim]v{version}[/]\n")


# ============================================================================
# SECTION SEPARATORS & ERROR PANEL
# ============================================================================

def print_section(title: str = ""):
    """Print a section separator with an optional centered title. Suppressed in quiet mode."""
    if _quiet_mode:
        return
    if title:
        console.print(Rule(f"[bold cyan]{title}[/]", style="dim"))
    else:
        console.print(Rule(style="dim"))


def print_error_panel(title: str, message: str, suggestion: str = ""):
    """Display a fatal error inside a red-bordered panel.

    Always shown regardless of quiet mode.

    Args:
        title: Short error category (e.g. "Missing File")
        message: Detailed error description
        suggestion: Optional remediation hint shown below the message
    """
    content = f"[bold red]{message}[/]"
    if suggestion:
        content += f"\n\n[dim]Suggestion: {suggestion}[/]"
    console.print()
    console.print(
        Panel(
            content,
            title=f"[bold red]Error: {title}[/]",
            border_style="red",
            padding=(1, 2),
        )
    )


# ============================================================================
# CLI-STYLE HELPER FUNCTIONS
# ============================================================================

def print_file(label: str, path: str):
    """Print a file path with label. Suppressed in quiet mode."""
    if not _quiet_mode:
        console.print(f"[cyan]\\[+][/] {label}: {make_file_link(path)}")


def print_count(label: str, count: int, style: str = "magenta"):
    """Print a count with label. Suppressed in quiet mode."""
    if not _quiet_mode:
        console.print(f"[cyan]\\[+][/] {label}: [{style}]{count:,}[/]")


# ============================================================================
# RUN STATISTICS
# ============================================================================

@dataclass
class ProcessingStats:
    """Overall processing statistics."""
    files_total: int = 0
    files_processed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    lines_total: int = 0
    unknown_total: int = 0
    truncated_documents: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    @property
    def elapsed_seconds(self) -> float:
        """Get elapsed time in seconds."""
        end = self.end_time or time.time()
        return end - self.start_time

    @property
    def lines_per_second(self) -> float:
        elapsed = self.elapsed_seconds
        return self.lines_total / elapsed if elapsed > 0 else 0

    def add_document(self, document: Document):
        """Account for one parsed document."""
        self.files_processed += 1
        self.lines_total += len(document)
        self.unknown_total += document.facts.unknown_lines
        if document.facts.truncated_kinds or document.events_of(EventKind.REPORT_ABORTED):
            self.truncated_documents += 1


def _format_duration(seconds: float) -> str:
    if seconds >= 60:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    return f"{seconds:.1f}s"


def print_summary_dashboard(stats: ProcessingStats):
    """Print a summary dashboard at the end of processing. Always shown."""
    stats.end_time = stats.end_time or time.time()

    summary_table = Table(show_header=False, box=None, padding=(0, 2), expand=True)
    summary_table.add_column("Metric", style="dim", width=16)
    summary_table.add_column("Value", style="bold", ratio=1)

    summary_table.add_row("⏱  Duration", f"[time]{_format_duration(stats.elapsed_seconds)}[/]")
    files = f"[file]{stats.files_processed:,}[/]"
    if stats.files_skipped:
        files += f" [dim]({stats.files_skipped:,} skipped)[/]"
    if stats.files_failed:
        files += f" [error]({stats.files_failed:,} failed)[/]"
    summary_table.add_row("📁 Files", files)
    summary_table.add_row("📊 Lines", f"[count]{stats.lines_total:,}[/]")
    if stats.elapsed_seconds > 0:
        summary_table.add_row("⚡ Throughput", f"[success]{stats.lines_per_second:,.0f}[/] lines/s")
    if stats.unknown_total:
        summary_table.add_row("❓ Unknown", f"[kind.unknown]{stats.unknown_total:,}[/] lines")
    else:
        summary_table.add_row("❓ Unknown", "[dim]None[/]")
    if stats.truncated_documents:
        summary_table.add_row("✂  Truncated", f"[kind.truncated]{stats.truncated_documents:,}[/] reports")

    console.print()
    console.print(
        Panel(
            summary_table,
            title="[bold]Summary[/]",
            border_style="cyan",
            padding=(1, 2),
            expand=True,
        )
    )


# ============================================================================
# DOCUMENT RENDERING
# ============================================================================

def build_facts_panel(document: Document) -> Panel:
    """
    Build a panel with the headline facts of one crash.

    Args:
        document: Parsed document

    Returns:
        Rich Panel renderable
    """
    facts = document.facts
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Fact", style="stat.label", width=14)
    table.add_column("Value", style="stat.value", ratio=1)

    os_parts = [part for part in (
        facts.os.family.value if facts.os.family else None,
        facts.os.vendor.value if facts.os.vendor else None,
        facts.os.version,
    ) if part]
    table.add_row("OS", " / ".join(os_parts) or "[dim]unknown[/]")
    table.add_row("Arch", facts.arch.value if facts.arch else "[dim]unknown[/]")
    if facts.java_release:
        table.add_row("Java", f"{facts.java_release} (feature {facts.java_feature})")
    if facts.signal:
        signal = facts.signal
        text = signal.number.name
        if signal.code:
            text += f" {signal.code.name}"
        if signal.address is not None:
            text += f" at {signal.address}"
        table.add_row("Signal", text)
    if facts.pid is not None:
        table.add_row("PID", str(facts.pid))
    if facts.crash_time:
        table.add_row("Time", facts.crash_time)
    if facts.elapsed_seconds is not None:
        table.add_row("Uptime", f"{facts.elapsed_seconds}s")
    if facts.java_command:
        table.add_row("Command", facts.java_command)
    if facts.truncated_kinds:
        kinds = ", ".join(sorted(kind.value for kind in facts.truncated_kinds))
        table.add_row("Truncated", f"[kind.truncated]{kinds}[/]")

    title = Path(document.source).name if document.source else "crash log"
    return Panel(table, title=f"[bold cyan]{title}[/]", border_style="cyan", padding=(0, 1))


def build_kind_table(document: Document, limit: Optional[int] = None) -> Table:
    """
    Build a table of event counts per kind, most frequent first.

    Args:
        document: Parsed document
        limit: Only show this many kinds (all when None)

    Returns:
        Rich Table renderable
    """
    table = Table(show_header=True, header_style="bold", border_style="dim", padding=(0, 1))
    table.add_column("Kind", no_wrap=True)
    table.add_column("Events", justify="right", style="magenta", width=8)

    for kind, count in document.kind_counts().most_common(limit):
        if kind is EventKind.UNKNOWN:
            label = f"[kind.unknown]{kind.value}[/]"
        elif kind is EventKind.REPORT_ABORTED:
            label = f"[kind.truncated]{kind.value}[/]"
        else:
            label = kind.value
        table.add_row(label, f"{count:,}")
    return table


def print_document(document: Document):
    """Print the facts panel and kind table of a document. Suppressed in quiet mode."""
    if _quiet_mode:
        return
    console.print(build_facts_panel(document))
    console.print(build_kind_table(document, limit=15))


# ============================================================================
# LOGGER
# ============================================================================

def get_rich_logger(name: str = "jvmcrash", debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Create a logger with Rich handler for styled console output.

    Args:
        name: Logger name
        debug: Enable debug level logging
        log_file: Optional file path for persistent logging

    Returns:
        Configured logger with Rich handler
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    # Rich console handler - hide level prefix for clean output
    rich_handler = RichHandler(
        console=console,
        show_path=False,
        show_time=False,
        show_level=False,
        markup=True,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    # File handler (if requested)
    if log_file:
        file_format = "%(asctime)s %(levelname)-8s %(message)s"
        if debug:
            file_format = "%(asctime)s %(levelname)-8s %(module)s:%(lineno)s %(funcName)s %(message)s"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    return logger


# ============================================================================
# TERMINAL HYPERLINKS
# ============================================================================

def make_file_link(path: str) -> str:
    """
    Create a Rich markup string with a clickable file:// hyperlink.

    Args:
        path: File path (relative or absolute)

    Returns:
        Rich markup string with clickable link
    """
    try:
        uri = Path(path).resolve().as_uri()
        return f"[link={uri}][cyan]{path}[/][/link]"
    except (ValueError, OSError):
        return f"[cyan]{path}[/]"
