"""
borrowfacts.core: shared spans, errors and diagnostics used across modules.

Modules:
  - span: byte-offset Span for statements
  - errors: fatal precondition errors and the load-tier ProgramFormatError
  - diagnostics: Diagnostic records reported by the CLI
"""

__all__ = [
	"span",
	"errors",
	"diagnostics",
]
