"""
Run-time options for the Kix interpreter
"""

from dataclasses import dataclass
from enum import Enum

from kix.diagnostics import ColorMode, DiagnosticFormatter
from kix.errors import Severity


class UnusedVariables(Enum):
    """How the resolver treats locals that are declared but never read"""
    OFF = "off"
    WARN = "warn"
    ERROR = "error"


@dataclass
class KixConfig:
    color_mode: ColorMode = ColorMode.AUTO
    print_ast: bool = False
    explain: bool = False  # append error codes and help text to diagnostics
    unused_variables: UnusedVariables = UnusedVariables.WARN
    include_functions: bool = False  # also check unused function names

    @property
    def unused_severity(self) -> Severity:
        if self.unused_variables == UnusedVariables.ERROR:
            return Severity.ERROR
        return Severity.WARNING

    def make_formatter(self) -> DiagnosticFormatter:
        return DiagnosticFormatter(self.color_mode, show_help=self.explain)

    @classmethod
    def from_args(cls, args) -> 'KixConfig':
        """Build options from parsed command-line arguments"""
        return cls(
            color_mode=ColorMode(args.color),
            print_ast=args.print_ast,
            explain=args.explain,
            unused_variables=UnusedVariables(args.unused),
            include_functions=args.unused_functions,
        )
