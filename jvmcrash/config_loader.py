#!python3
"""
YAML configuration file loader for jvmcrash.

This module provides:
- YAML configuration file parsing
- Configuration validation
- Merging of file config with CLI arguments
- Default value handling
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import ParserConfig


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded or is invalid."""


@dataclass
class InputConfig:
    """Configuration for input files."""
    paths: List[str] = field(default_factory=list)
    recursive: bool = True
    file_pattern: str = "*"
    select: Optional[List[str]] = None  # Include only files matching these strings
    avoid: Optional[List[str]] = None  # Exclude files matching these strings
    encoding: Optional[str] = None  # None = detect with chardet


@dataclass
class ParserSection:
    """Configuration for the line parser."""
    strict: bool = False
    hashes: bool = False
    drop_throwaway: bool = False


@dataclass
class OutputConfig:
    """Configuration for output files."""
    file: str = "crash_events.json"
    templates: Optional[List[Dict[str, str]]] = None  # List of {template, output} pairs
    log_file: Optional[str] = None
    no_output: bool = False


@dataclass
class ProcessingConfig:
    """Configuration for processing options."""
    force: bool = False  # Parse files the detector does not recognise
    debug: bool = False
    quiet: bool = False


@dataclass
class JvmCrashConfig:
    """Complete jvmcrash configuration."""
    input: InputConfig = field(default_factory=InputConfig)
    parser: ParserSection = field(default_factory=ParserSection)
    output: OutputConfig = field(default_factory=OutputConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)

    def parser_config(self) -> ParserConfig:
        """ParserConfig for the document assembler."""
        return ParserConfig(
            strict=self.parser.strict,
            hashes=self.parser.hashes,
            drop_throwaway=self.parser.drop_throwaway,
            encoding=self.input.encoding,
        )


class ConfigLoader:
    """
    Load and validate jvmcrash configuration from YAML files.

    Supports:
    - Full YAML configuration files
    - Merging with CLI arguments (CLI takes precedence)
    - Default value handling
    - Configuration validation
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        """
        Initialize ConfigLoader.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def load_yaml(self, config_path: str) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Dictionary with configuration values

        Raises:
            ConfigError: If the file doesn't exist, isn't valid YAML or isn't a mapping
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {config_path}")

        self.logger.info(f"[cyan][+] Loaded configuration from: {config_path}[/]")
        return config_dict

    def parse_config(self, config_dict: Dict[str, Any]) -> JvmCrashConfig:
        """
        Parse configuration dictionary into JvmCrashConfig dataclass.

        Args:
            config_dict: Raw configuration dictionary

        Returns:
            JvmCrashConfig instance
        """
        config = JvmCrashConfig()

        # Parse input section
        if 'input' in config_dict:
            inp = config_dict['input'] or {}
            paths = inp.get('paths') or []
            if isinstance(paths, str):
                paths = [paths]
            config.input = InputConfig(
                paths=paths,
                recursive=inp.get('recursive', True),
                file_pattern=inp.get('file_pattern') or "*",
                select=inp.get('select'),
                avoid=inp.get('avoid'),
                encoding=inp.get('encoding'),
            )

        # Parse parser section
        if 'parser' in config_dict:
            par = config_dict['parser'] or {}
            config.parser = ParserSection(
                strict=par.get('strict', False),
                hashes=par.get('hashes', False),
                drop_throwaway=par.get('drop_throwaway', False),
            )

        # Parse output section
        if 'output' in config_dict:
            out = config_dict['output'] or {}
            config.output = OutputConfig(
                file=out.get('file', 'crash_events.json'),
                templates=out.get('templates'),
                log_file=out.get('log_file'),
                no_output=out.get('no_output', False),
            )

        # Parse processing section
        if 'processing' in config_dict:
            proc = config_dict['processing'] or {}
            config.processing = ProcessingConfig(
                force=proc.get('force', False),
                debug=proc.get('debug', False),
                quiet=proc.get('quiet', False),
            )

        unknown = sorted(set(config_dict) - {'input', 'parser', 'output', 'processing'})
        if unknown:
            self.logger.warning(f"[yellow][!] Ignoring unknown configuration sections: {', '.join(unknown)}[/]")

        return config

    def load(self, config_path: str) -> JvmCrashConfig:
        """
        Load and parse YAML configuration file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            JvmCrashConfig instance
        """
        config_dict = self.load_yaml(config_path)
        return self.parse_config(config_dict)

    def validate_config(self, config: JvmCrashConfig) -> List[str]:
        """
        Validate configuration and return list of issues.

        Args:
            config: Configuration to validate

        Returns:
            List of validation error messages (empty if valid)
        """
        issues = []

        # Validate input
        for path in config.input.paths:
            if not Path(path).exists():
                issues.append(f"Input path does not exist: {path}")

        if config.input.encoding:
            try:
                "".encode(config.input.encoding)
            except LookupError:
                issues.append(f"Unknown encoding: {config.input.encoding}")

        # Validate templates
        if config.output.templates:
            for tmpl in config.output.templates:
                if not isinstance(tmpl, dict) or 'template' not in tmpl or 'output' not in tmpl:
                    issues.append("Template entries must have 'template' and 'output' keys")
                elif not Path(tmpl['template']).exists():
                    issues.append(f"Template file not found: {tmpl['template']}")

        # Validate flags
        for section, name in (('parser', 'strict'), ('parser', 'hashes'), ('parser', 'drop_throwaway'),
                              ('processing', 'force'), ('processing', 'debug'), ('processing', 'quiet')):
            value = getattr(getattr(config, section), name)
            if not isinstance(value, bool):
                issues.append(f"'{section}.{name}' must be true or false, got: {value!r}")

        return issues

    def merge_with_args(self, config: JvmCrashConfig, args) -> JvmCrashConfig:
        """
        Merge YAML config with CLI arguments. CLI arguments take precedence.

        Args:
            config: Base configuration from YAML
            args: argparse namespace with CLI arguments

        Returns:
            Merged configuration
        """
        # Input overrides
        if hasattr(args, 'file') and args.file:
            config.input.paths = list(args.file)
        if hasattr(args, 'file_pattern') and args.file_pattern:
            config.input.file_pattern = args.file_pattern
        if hasattr(args, 'no_recursion') and args.no_recursion:
            config.input.recursive = False
        if hasattr(args, 'select') and args.select:
            config.input.select = [s[0] for s in args.select]
        if hasattr(args, 'avoid') and args.avoid:
            config.input.avoid = [a[0] for a in args.avoid]
        if hasattr(args, 'encoding') and args.encoding:
            config.input.encoding = args.encoding

        # Parser overrides
        if hasattr(args, 'strict') and args.strict:
            config.parser.strict = True
        if hasattr(args, 'hashes') and args.hashes:
            config.parser.hashes = True
        if hasattr(args, 'drop_throwaway') and args.drop_throwaway:
            config.parser.drop_throwaway = True

        # Output overrides
        if hasattr(args, 'outfile') and args.outfile != "crash_events.json":
            config.output.file = args.outfile
        if hasattr(args, 'template') and args.template:
            config.output.templates = []
            for i, tmpl in enumerate(args.template):
                output = args.templateOutput[i][0] if args.templateOutput and i < len(args.templateOutput) \
                    else f"output_{i}.txt"
                config.output.templates.append({'template': tmpl[0], 'output': output})
        if hasattr(args, 'logfile') and args.logfile:
            config.output.log_file = args.logfile
        if hasattr(args, 'nolog') and args.nolog:
            config.output.no_output = True

        # Processing overrides
        if hasattr(args, 'force') and args.force:
            config.processing.force = True
        if hasattr(args, 'debug') and args.debug:
            config.processing.debug = True
        if hasattr(args, 'quiet') and args.quiet:
            config.processing.quiet = True

        return config


DEFAULT_CONFIG = """# jvmcrash Configuration File
# All options can be overridden by command-line arguments

# Input configuration
input:
  # Crash log files or directories containing crash logs
  paths: []  # Example: ["hs_err_pid12345.log", "crashes/"]

  # Search recursively in directories
  recursive: true

  # File glob pattern used inside directories
  file_pattern: "*"

  # Include only files containing these strings in filename
  select: null  # Example: ["hs_err"]

  # Exclude files containing these strings in filename
  avoid: null  # Example: ["replay_pid"]

  # File encoding (null = detect with chardet)
  encoding: null

# Parser configuration
parser:
  # Stop on the first line a grammar cannot extract fields from
  strict: false

  # Add the xxhash of each original line
  hashes: false

  # Leave blank lines, "END." and other throwaway lines out of the output
  drop_throwaway: false

# Output configuration
output:
  # JSON output file
  file: crash_events.json

  # Jinja2 templates (list of template/output pairs)
  templates: null
  # Example:
  # templates:
  #   - template: templates/crashSummary.tmpl
  #     output: crash_summary.md

  # Log file path (null = console only)
  log_file: null

  # Disable output files
  no_output: false

# Processing configuration
processing:
  # Parse files that do not look like JVM fatal error logs
  force: false

  # Enable debug logging
  debug: false

  # Only print errors
  quiet: false
"""


def create_default_config_file(output_path: str = "jvmcrash_config.yaml"):
    """
    Create a default configuration file with all options documented.

    Args:
        output_path: Path to write the configuration file
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(DEFAULT_CONFIG)

    print(f"Created default configuration file: {output_path}")
