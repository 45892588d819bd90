"""Fix request construction.

The prompt is a pure function of the diagnostic and the content snapshot:
the same inputs always produce the same text. The file content is embedded
verbatim and never truncated, because the model must return the whole file.
"""

from __future__ import annotations

from checkstyle_fixer.models.diagnostic import Diagnostic
from checkstyle_fixer.models.fix import FixRequest

FIX_PROMPT_TEMPLATE = """You are fixing a single Checkstyle violation in a {language} source file.

<violation>
File: {file}
Location: line {line}, column {column}
Rule: {rule}
Message: {message}
</violation>

<instructions>
1. Fix ONLY the violation described above.
2. Do not change formatting, names, comments or behaviour anywhere else.
3. Return the COMPLETE corrected file content, from the first line to the last.
4. Do not add explanations, notes or any text outside the code.
</instructions>

<file_content>
{content}
</file_content>"""

LANGUAGE_NAMES = {
    ".java": "Java",
    ".kt": "Kotlin",
    ".groovy": "Groovy",
    ".scala": "Scala",
}


def language_for(path: str) -> str:
    """Human-readable language name for a source path."""
    for extension, name in LANGUAGE_NAMES.items():
        if path.endswith(extension):
            return name
    return "source"


def build_fix_prompt(diagnostic: Diagnostic, content: str) -> str:
    """Build the instruction text for fixing one diagnostic.

    Args:
        diagnostic: The violation to fix
        content: Full current text of the file

    Returns:
        Prompt text including the message, rule, location and full content
    """
    return FIX_PROMPT_TEMPLATE.format(
        language=language_for(diagnostic.file),
        file=diagnostic.file,
        line=diagnostic.line,
        column=diagnostic.column,
        rule=diagnostic.rule,
        message=diagnostic.message,
        content=content,
    )


def build_fix_request(diagnostic: Diagnostic, content: str) -> FixRequest:
    """Bundle a diagnostic, its content snapshot and the prompt."""
    return FixRequest(
        diagnostic=diagnostic,
        file_content=content,
        prompt=build_fix_prompt(diagnostic, content),
    )
