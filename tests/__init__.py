"""
Railguard test suite.

Tests are organized by layer:
    tests/policy/   Policy engine: matchers, scanners, inspector, parser, lint, explain
    tests/unit/     Hook boundary, audit log, settings, install, CLI

Run all tests:
    pytest
"""
