"""
jvmcrash Test Suite

This package contains the tests for the jvmcrash parser and command-line tool.

Test Modules:
- test_normalizers: Tests for byte sizes, addresses, signals, OS fingerprints and devices
- test_classifier: Tests for line classification and the header order
- test_state: Tests for section state transitions
- test_builders: Tests for field extraction
- test_assembler: Tests for document assembly and crash facts
- test_document: Tests for Document helpers and serialization
- test_detector: Tests for crash log detection
- test_config_loader: Tests for YAML configuration
- test_templates: Tests for Jinja2 template processing
- test_utils: Tests for utility/helper functions
- test_console: Tests for Rich console output
- test_cli: Tests for the command-line tool
"""
