"""
Diagnostic formatting and reporting for the Kix scripting language
Renders diagnostics in the classic one-line format with optional ANSI colors
"""

import sys
import os
from typing import List, Optional, TextIO
from enum import Enum

from kix.errors import Diagnostic, KixError, KixRuntimeError, Severity


class ColorMode(Enum):
    """Color output modes"""
    NEVER = "never"
    ALWAYS = "always"
    AUTO = "auto"


class DiagnosticFormatter:
    """Formats diagnostics for human-readable output"""

    def __init__(self, color_mode: ColorMode = ColorMode.AUTO, show_help: bool = False):
        self.color_mode = color_mode
        self.show_help = show_help

        # ANSI color codes
        self.colors = {
            'reset': '\033[0m',
            'bold': '\033[1m',
            'cyan': '\033[36m',
            'bright_red': '\033[91m',
            'bright_yellow': '\033[93m',
            'bright_blue': '\033[94m',
        }

    def should_use_colors(self, file: TextIO) -> bool:
        """Determine if we should use ANSI colors"""
        if self.color_mode == ColorMode.NEVER:
            return False
        elif self.color_mode == ColorMode.ALWAYS:
            return True
        else:  # AUTO
            isatty = getattr(file, 'isatty', None)
            return bool(isatty and isatty()) and os.getenv('NO_COLOR') is None

    def colorize(self, text: str, color: str, file: TextIO) -> str:
        """Apply color to text if colors are enabled"""
        if not self.should_use_colors(file):
            return text
        return f"{self.colors.get(color, '')}{text}{self.colors['reset']}"

    def format_diagnostic(self, diagnostic: Diagnostic, file: TextIO) -> str:
        """Format a compile-time diagnostic: [line N] Error<location>: message"""
        severity_color = self._get_severity_color(diagnostic.severity)
        label = diagnostic.severity.value.title()
        header = f"[line {diagnostic.line}] {label}{diagnostic.location}: {diagnostic.message}"
        lines = [self.colorize(header, severity_color, file)]
        lines.extend(self._format_help(diagnostic, file))
        return "\n".join(lines) + "\n"

    def format_runtime_error(self, diagnostic: Diagnostic, file: TextIO) -> str:
        """Format a runtime diagnostic: message, then [line N] on its own line"""
        lines = [
            self.colorize(diagnostic.message, 'bright_red', file),
            self.colorize(f"[line {diagnostic.line}]", 'bright_blue', file),
        ]
        lines.extend(self._format_help(diagnostic, file))
        return "\n".join(lines) + "\n"

    def _format_help(self, diagnostic: Diagnostic, file: TextIO) -> List[str]:
        if not self.show_help:
            return []
        lines = [self.colorize(f"   = code: {diagnostic.code}", 'bright_blue', file)]
        if diagnostic.help:
            lines.append(self.colorize(f"   = help: {diagnostic.help}", 'cyan', file))
        return lines

    def _get_severity_color(self, severity: Severity) -> str:
        """Get color for severity level"""
        color_map = {
            Severity.ERROR: 'bright_red',
            Severity.WARNING: 'bright_yellow',
        }
        return color_map.get(severity, 'reset')


class Reporter:
    """Collects and emits the diagnostics of one session.

    Replaces process-wide error flags: every stage receives the reporter
    explicitly, so independent sessions never share state. ``had_error``
    covers lexical, syntax and resolution errors; ``had_runtime_error``
    is set once a run aborts. Warnings are emitted but set neither flag.
    """

    def __init__(self, formatter: Optional[DiagnosticFormatter] = None,
                 stream: Optional[TextIO] = None):
        self.formatter = formatter or DiagnosticFormatter()
        self.stream = stream
        self.diagnostics: List[Diagnostic] = []
        self.had_error = False
        self.had_runtime_error = False

    @property
    def output(self) -> TextIO:
        # Looked up per call so redirected stderr is honoured
        return self.stream or sys.stderr

    def report(self, error: KixError):
        """Record and emit a lexical, syntax or resolution diagnostic"""
        diagnostic = error.diagnostic
        self.diagnostics.append(diagnostic)
        if diagnostic.is_error:
            self.had_error = True
        self._emit(self.formatter.format_diagnostic(diagnostic, self.output))

    def runtime_error(self, error: KixRuntimeError):
        """Record and emit the runtime error that aborted a run"""
        self.diagnostics.append(error.diagnostic)
        self.had_runtime_error = True
        self._emit(self.formatter.format_runtime_error(error.diagnostic, self.output))

    def reset(self):
        """Forget compile-time errors between interactive inputs"""
        self.had_error = False

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    def _emit(self, text: str):
        file = self.output
        file.write(text)
        file.flush()
