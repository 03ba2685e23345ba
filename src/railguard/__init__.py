"""
Railguard — inline policy gate for AI coding agents.

Railguard runs as a PreToolUse hook. Every tool call the agent wants to make
(shell command, file write, web fetch, integration tool) is inspected against
a policy before it runs, and the hook answers allow, ask, or deny.

Package layout (src/railguard/):
  core/policy/  — matchers, policy document, scanners, inspector
  core/         — hook protocol, audit log, install, settings
  cli/          — Click CLI entry point
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
