#!python3

# Standard libs
import argparse
import signal
import sys
from pathlib import Path

# External libs
import orjson as json

# jvmcrash package
from jvmcrash import (
    __version__,
    ConfigError,
    ConfigLoader,
    CrashLogDetector,
    DocumentAssembler,
    GrammarDefectError,
    JvmCrashConfig,
    ProcessingStats,
    TemplateConfig,
    TemplateEngine,
    avoid_files,
    check_if_exists,
    collect_files,
    create_default_config_file,
    format_size,
    init_logger,
    print_banner,
    print_count,
    print_document,
    print_error_panel,
    print_file,
    print_section,
    print_summary_dashboard,
    quit_on_error,
    read_crash_log,
    select_files,
    set_quiet_mode,
)


def signal_handler(sig, frame):
    print("[-] Execution interrupted !")
    sys.exit(0)


def build_parser():
    parser = argparse.ArgumentParser(description="Classify and extract every line of JVM fatal error (hs_err) logs")
    # Input files and filtering/selection options
    logs_input_args = parser.add_argument_group('INPUT FILES AND FILTERING/SELECTION OPTIONS')
    logs_input_args.add_argument("-f", "--file", help="Crash log file or directory containing crash logs", type=str, nargs='+')
    logs_input_args.add_argument("-s", "--select", help="Process only files with filenames containing the specified string (applied before exclusions)", action='append', nargs='+')
    logs_input_args.add_argument("-a", "--avoid", help="Skip files with filenames containing the specified string", action='append', nargs='+')
    logs_input_args.add_argument("-fp", "--file-pattern", help="Python Glob pattern to select files (only works with directories)", type=str)
    logs_input_args.add_argument("--no-recursion", help="Search for crash logs only in the specified directory (disable recursive search)", action="store_true")
    logs_input_args.add_argument("-LE", "--encoding", help="Force the encoding of crash logs (default: detect with chardet)", type=str)
    logs_input_args.add_argument("--force", help="Parse files even when they do not look like JVM fatal error logs", action='store_true')
    # Parser options
    parser_args = parser.add_argument_group('PARSER OPTIONS')
    parser_args.add_argument("--strict", help="Stop on the first line a grammar cannot extract fields from", action='store_true')
    parser_args.add_argument("--hashes", help="Add xxhash64 of the original log line to each event", action='store_true')
    parser_args.add_argument("--drop-throwaway", help="Leave blank lines, 'END.' and other throwaway lines out of the output", action='store_true')
    # Output formats and output files options
    output_formats_args = parser.add_argument_group('OUTPUT FORMATS AND OUTPUT FILES OPTIONS')
    output_formats_args.add_argument("-o", "--outfile", help="Output file for parsed documents", type=str, default="crash_events.json")
    output_formats_args.add_argument("-l", "--logfile", help="Log file name", type=str)
    output_formats_args.add_argument("-n", "--nolog", help="Don't create log or result files", action='store_true')
    # Advanced configuration options
    config_formats_args = parser.add_argument_group('ADVANCED CONFIGURATION OPTIONS')
    config_formats_args.add_argument("-c", "--config", help="YAML configuration file", type=str)
    config_formats_args.add_argument("--generate-config", help="Write a documented default configuration file and exit", type=str, metavar="PATH")
    config_formats_args.add_argument("--debug", help="Enable debug logging", action='store_true')
    config_formats_args.add_argument("-q", "--quiet", help="Only print errors and the final summary", action='store_true')
    config_formats_args.add_argument("-v", "--version", help="Display jvmcrash version", action='store_true')
    # Templating options
    templating_formats_args = parser.add_argument_group('TEMPLATING OPTIONS')
    templating_formats_args.add_argument("--template", help="Jinja2 template to use for output generation", type=str, action='append', nargs='+')
    templating_formats_args.add_argument("--templateOutput", help="Output file for Jinja2 template results", type=str, action='append', nargs='+')
    return parser


def load_config(args, logger) -> JvmCrashConfig:
    """YAML configuration (if any) merged with command-line arguments."""
    loader = ConfigLoader(logger=logger)
    config = JvmCrashConfig()
    if args.config:
        try:
            config = loader.load(args.config)
        except ConfigError as e:
            quit_on_error(f"[red]   [-] {e}[/]", logger)
    config = loader.merge_with_args(config, args)
    for issue in loader.validate_config(config):
        if issue.startswith("Input path does not exist"):
            logger.warning(f"[yellow]   [!] {issue}[/]")
        else:
            quit_on_error(f"[red]   [-] {issue}[/]", logger)
    return config


def main():
    parser = build_parser()
    args = parser.parse_args()

    signal.signal(signal.SIGINT, signal_handler)

    # Print version and quit
    if args.version:
        print(f"jvmcrash - v{__version__}")
        sys.exit(0)

    # Write the default configuration and quit
    if args.generate_config:
        create_default_config_file(args.generate_config)
        sys.exit(0)

    # Init logging
    if args.nolog:
        args.logfile = None
    set_quiet_mode(args.quiet)
    console_logger = init_logger(args.debug, args.logfile)
    print_banner(__version__)

    config = load_config(args, console_logger)
    if config.processing.quiet:
        set_quiet_mode(True)
    if config.output.log_file and not args.logfile and not args.nolog:
        console_logger = init_logger(config.processing.debug, config.output.log_file)

    # Check mandatory options
    if not config.input.paths:
        console_logger.error("[red]   [-] No crash log path provided. Use '-f <PATH TO LOGS>' or 'input.paths' in the configuration file[/]")
        sys.exit(2)

    # Check templates
    templates = config.output.templates or []
    if args.template is not None and (args.templateOutput is None or len(args.template) != len(args.templateOutput)):
        quit_on_error("[red]   [-] Number of templates output must match number of templates[/]", console_logger)
    for template in templates:
        check_if_exists(template['template'], f"[red]   [-] Cannot find template: {template['template']}[/]", console_logger)

    print_section("Input")
    file_list = collect_files(config.input.paths, config.input.file_pattern, config.input.recursive, console_logger)
    file_list = avoid_files(select_files(file_list, [[s] for s in config.input.select] if config.input.select else None),
                            [[a] for a in config.input.avoid] if config.input.avoid else None)
    if not file_list:
        quit_on_error("[red]   [-] No file found. Please verify filters, directory or the pattern with '--file-pattern'[/]", console_logger)
    print_count("Files to process", len(file_list))

    stats = ProcessingStats(files_total=len(file_list))
    detector = CrashLogDetector(logger=console_logger)
    parser_config = config.parser_config()
    assembler = DocumentAssembler(parser_config, logger=console_logger)
    results = []

    print_section("Parsing")
    for crash_file in file_list:
        detection = detector.detect(Path(crash_file))
        console_logger.debug(f"    [>] {crash_file} ({format_size(Path(crash_file).stat().st_size)}): {detection}")
        if not detection.is_crash_log and not config.processing.force:
            console_logger.warning(f"[yellow]   [!] Skipping {crash_file}: {detection.details} (use '--force' to parse anyway)[/]")
            stats.files_skipped += 1
            continue
        try:
            lines = read_crash_log(crash_file, parser_config.encoding, console_logger)
            document = assembler.parse(lines, source=str(crash_file))
        except OSError as e:
            console_logger.error(f"[red]   [-] Cannot read {crash_file}: {e}[/]")
            stats.files_failed += 1
            continue
        except GrammarDefectError as e:
            print_error_panel("Grammar defect", f"{crash_file}: {e}", "Run without '--strict' to keep such lines as unknown events")
            sys.exit(1)
        stats.add_document(document)
        print_document(document)
        results.append(document.to_dict(drop_throwaway=parser_config.drop_throwaway))

    # Write outputs
    if not args.nolog and not config.output.no_output:
        with open(config.output.file, 'wb') as f:
            f.write(json.dumps(results, option=json.OPT_INDENT_2))
        print_file("Results written in", config.output.file)

        if templates and results:
            template_config = TemplateConfig(
                template=[[template['template']] for template in templates],
                template_output=[[template['output']] for template in templates],
            )
            TemplateEngine(template_config, logger=console_logger).run(results)

    print_summary_dashboard(stats)


if __name__ == "__main__":
    main()
