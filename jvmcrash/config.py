#!python3
"""
Configuration dataclasses for jvmcrash.

This module provides typed configuration containers shared by the document
assembler and the output stage.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ParserConfig:
    """
    Configuration for document parsing.

    Used by DocumentAssembler.
    """
    # Re-raise GrammarDefectError instead of degrading the line to UNKNOWN
    strict: bool = False
    # Attach an xxHash64 digest of the raw line to every event
    hashes: bool = False
    # Leave throwaway events out of the output (the Document keeps them)
    drop_throwaway: bool = False
    # Input encoding; None means detect with chardet
    encoding: Optional[str] = None


@dataclass
class TemplateConfig:
    """
    Configuration for template engine operations.

    Used by TemplateEngine. Each entry of ``template`` pairs with the entry
    at the same position in ``template_output``.
    """
    template: List[List[str]] = field(default_factory=list)
    template_output: List[List[str]] = field(default_factory=list)
