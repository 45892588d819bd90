"""Core fix pipeline components.

This module exports the main business logic:
- DiagnosticParser: Extracts Checkstyle diagnostics from build output
- FileContextLoader: Reads and writes the affected source files
- FixApplicator: Applies fixes file by file, diagnostic by diagnostic
- build_fix_request: Builds the instruction sent to the generation service
- sanitize_response: Recovers file content from the service's reply
"""

from checkstyle_fixer.core.diagnostic_parser import DiagnosticParser
from checkstyle_fixer.core.file_context import FileContextLoader
from checkstyle_fixer.core.fixer import FixApplicator, group_by_file
from checkstyle_fixer.core.prompt_builder import build_fix_prompt, build_fix_request
from checkstyle_fixer.core.sanitizer import sanitize_response, strip_code_fences

__all__ = [
    "DiagnosticParser",
    "FileContextLoader",
    "FixApplicator",
    "build_fix_prompt",
    "build_fix_request",
    "group_by_file",
    "sanitize_response",
    "strip_code_fences",
]
