#!python3
"""
jvmcrash - Line classification and field extraction for JVM fatal error logs.

This package turns an hs_err crash log into an ordered list of typed events,
one per input line:

Modules:
- kinds: EventKind catalogue and line roles
- patterns: shared regular expression fragments
- normalizers: byte sizes, addresses, signals, OS fingerprints, devices
- grammar: per-kind header/body/footer grammars and the audited header order
- classifier: LineClassifier (classify a line against the open section)
- state: SectionState threaded between lines
- builders: field extraction for every kind
- document: Document, DocumentFacts and FactCollector
- assembler: DocumentAssembler and parse_document
- detector: CrashLogDetector for input sniffing
- templates: TemplateEngine for Jinja2 output
- config / config_loader: dataclass and YAML configuration
- console / utils: rich console output, logging and file helpers
"""

import logging

from .kinds import EventKind, Role
from .normalizers import (
    Arch,
    ByteSize,
    Device,
    HexAddress,
    OsFamily,
    OsFingerprint,
    OsVendor,
    SignalCode,
    SignalDescriptor,
    SignalNumber,
    classify_device,
    match_os,
    parse_java_release,
    parse_signal,
)
from .events import Event, GrammarDefectError, RawLine
from .grammar import GRAMMARS, HEADER_ORDER, SectionGrammar, StandaloneGrammar
from .state import CLOSED, SectionState, advance
from .classifier import LineClassifier, classify
from .builders import build, split_command_line
from .document import Document, DocumentFacts, FactCollector
from .config import ParserConfig, TemplateConfig
from .assembler import DocumentAssembler, parse_document
from .detector import CrashLogDetector, DetectionResult
from .templates import TemplateEngine
from .utils import (
    init_logger,
    quit_on_error,
    check_if_exists,
    collect_files,
    select_files,
    avoid_files,
    format_size,
    read_crash_log,
)
from .console import (
    console,
    ProcessingStats,
    get_rich_logger,
    set_quiet_mode,
    is_quiet,
    print_banner,
    print_section,
    print_error_panel,
    print_summary_dashboard,
    build_facts_panel,
    build_kind_table,
    print_document,
    print_file,
    print_count,
)
from .config_loader import (
    ConfigError,
    ConfigLoader,
    JvmCrashConfig,
    InputConfig,
    ParserSection,
    OutputConfig,
    ProcessingConfig,
    create_default_config_file,
)

# Library-safe logging: no "No handler found" warnings without configuration
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Catalogue
    'EventKind',
    'Role',
    # Normalized values
    'Arch',
    'ByteSize',
    'Device',
    'HexAddress',
    'OsFamily',
    'OsFingerprint',
    'OsVendor',
    'SignalCode',
    'SignalDescriptor',
    'SignalNumber',
    'classify_device',
    'match_os',
    'parse_java_release',
    'parse_signal',
    # Events and grammars
    'Event',
    'GrammarDefectError',
    'RawLine',
    'GRAMMARS',
    'HEADER_ORDER',
    'SectionGrammar',
    'StandaloneGrammar',
    # Parsing pipeline
    'CLOSED',
    'SectionState',
    'advance',
    'LineClassifier',
    'classify',
    'build',
    'split_command_line',
    'Document',
    'DocumentFacts',
    'FactCollector',
    'DocumentAssembler',
    'parse_document',
    # Configuration dataclasses
    'ParserConfig',
    'TemplateConfig',
    # Input detection and output
    'CrashLogDetector',
    'DetectionResult',
    'TemplateEngine',
    # Utility functions
    'init_logger',
    'quit_on_error',
    'check_if_exists',
    'collect_files',
    'select_files',
    'avoid_files',
    'format_size',
    'read_crash_log',
    # Rich console output
    'console',
    'ProcessingStats',
    'get_rich_logger',
    'set_quiet_mode',
    'is_quiet',
    'print_banner',
    'print_section',
    'print_error_panel',
    'print_summary_dashboard',
    'build_facts_panel',
    'build_kind_table',
    'print_document',
    'print_file',
    'print_count',
    # YAML configuration
    'ConfigError',
    'ConfigLoader',
    'JvmCrashConfig',
    'InputConfig',
    'ParserSection',
    'OutputConfig',
    'ProcessingConfig',
    'create_default_config_file',
]

__version__ = "1.0.0"
