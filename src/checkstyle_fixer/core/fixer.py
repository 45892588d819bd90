"""Sequential fix application across diagnostics and files.

This module implements the FixApplicator, the top-level controller of the
fix pipeline. Diagnostics are grouped by file and processed strictly one at
a time. Within a file every request is built from the content left by the
previous successful fix, so line-number drift between interacting
diagnostics (an import removal shifting later lines, say) is handled by
re-sending the whole, current file each time.

Failures are per diagnostic. A file that is missing or cannot be read fails
its whole group; nothing else stops the run. In a dry run, fixes are counted
as would-apply rather than applied.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from checkstyle_fixer.core.prompt_builder import build_fix_request
from checkstyle_fixer.core.sanitizer import sanitize_response
from checkstyle_fixer.models.diagnostic import Diagnostic
from checkstyle_fixer.models.fix import (
    FileFixSession,
    FileFixSummary,
    FixOutcome,
    FixStatus,
    RunSummary,
)
from checkstyle_fixer.utils.async_helpers import (
    EmptyFixError,
    MalformedResponseError,
    ServiceUnavailableError,
    SourceFileNotFoundError,
)
from checkstyle_fixer.utils.logging import LogEventNames, bind_context, unbind_context

if TYPE_CHECKING:
    from checkstyle_fixer.core.file_context import FileContextLoader
    from checkstyle_fixer.interfaces.llm import GenerationService

log = structlog.get_logger()


def group_by_file(diagnostics: Sequence[Diagnostic]) -> dict[str, list[Diagnostic]]:
    """Group diagnostics by file.

    Files keep the order of their first appearance and each group keeps the
    order its diagnostics were extracted in.
    """
    groups: dict[str, list[Diagnostic]] = {}
    for diagnostic in diagnostics:
        groups.setdefault(diagnostic.file, []).append(diagnostic)
    return groups


class FixApplicator:
    """Drives read -> request -> sanitize -> write for every diagnostic.

    Responsibilities:
    - Group diagnostics per file and keep a FileFixSession per group
    - Thread each file's current content from one fix into the next
    - Contain every failure to the diagnostic that caused it
    - Report per-file and end-of-run counts

    Example:
        applicator = FixApplicator(service, FileContextLoader())
        summary = await applicator.run(parser.extract(build_output))
        print(f"{summary.applied}/{summary.total} fixed")
    """

    def __init__(
        self,
        service: GenerationService,
        loader: FileContextLoader,
        dry_run: bool = False,
    ) -> None:
        """Initialize the FixApplicator.

        Args:
            service: Generation service used to produce fixed file content
            loader: File access for reading and writing sources
            dry_run: Request and sanitize fixes without writing them
        """
        self._service = service
        self._loader = loader
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Return True if fixes are computed but never written."""
        return self._dry_run

    async def run(self, diagnostics: Sequence[Diagnostic]) -> RunSummary:
        """Attempt every diagnostic, file by file.

        Args:
            diagnostics: Diagnostics in extraction order

        Returns:
            RunSummary with one FileFixSummary per distinct file
        """
        groups = group_by_file(diagnostics)

        if not groups:
            log.info(LogEventNames.RUN_NOTHING_TO_FIX)
            return RunSummary()

        log.info(
            LogEventNames.RUN_STARTING,
            diagnostics=len(diagnostics),
            files=len(groups),
            model=self._service.model_name,
            dry_run=self._dry_run,
        )

        summaries = []
        for path, group in groups.items():
            summaries.append(await self.fix_file(path, group))

        summary = RunSummary(files=tuple(summaries))
        log.info(
            LogEventNames.RUN_COMPLETE,
            files=summary.files_processed,
            total=summary.total,
            applied=summary.applied,
            would_apply=summary.would_apply,
            failed=summary.failed,
            dry_run=self._dry_run,
        )
        return summary

    async def fix_file(self, path: str, diagnostics: list[Diagnostic]) -> FileFixSummary:
        """Fix all diagnostics of one file in order.

        Args:
            path: File path shared by the diagnostics
            diagnostics: The file's diagnostics in extraction order

        Returns:
            FileFixSummary with applied/failed counts
        """
        bind_context(file=path)
        try:
            try:
                content = self._loader.read(path)
            except SourceFileNotFoundError as e:
                log.warning(LogEventNames.FILE_NOT_FOUND, diagnostics=len(diagnostics))
                summary = FileFixSummary.all_failed(
                    path, diagnostics, FixStatus.FILE_NOT_FOUND, str(e)
                )
            except (OSError, UnicodeDecodeError) as e:
                log.warning(
                    LogEventNames.FILE_READ_FAILED,
                    diagnostics=len(diagnostics),
                    error=str(e),
                )
                summary = FileFixSummary.all_failed(
                    path, diagnostics, FixStatus.READ_FAILED, str(e)
                )
            else:
                session = FileFixSession(path=path, original_content=content)
                log.info(LogEventNames.FILE_SESSION_STARTED, diagnostics=len(diagnostics))

                for diagnostic in diagnostics:
                    await self.fix_diagnostic(session, diagnostic)

                summary = session.summary()

            log.info(
                LogEventNames.FILE_SUMMARY,
                applied=summary.applied,
                would_apply=summary.would_apply,
                total=summary.total,
                failed=summary.failed,
            )
            return summary
        finally:
            unbind_context("file")

    async def fix_diagnostic(
        self,
        session: FileFixSession,
        diagnostic: Diagnostic,
    ) -> FixOutcome:
        """Attempt one fix against the session's current content.

        The outcome is recorded on the session. No exception escapes: every
        failure becomes a FixOutcome and leaves ``current_content`` as it was.

        Args:
            session: State of the file being fixed
            diagnostic: The violation to fix

        Returns:
            FixOutcome describing what happened
        """
        if not self._loader.exists(session.path):
            return self._fail(
                session,
                diagnostic,
                FixStatus.FILE_NOT_FOUND,
                f"Source file not found: {session.path}",
            )

        request = build_fix_request(diagnostic, session.current_content)
        log.info(
            LogEventNames.FIX_REQUESTED,
            line=diagnostic.line,
            column=diagnostic.column,
            rule=diagnostic.rule,
        )

        try:
            envelope = await self._service.generate(request.prompt)
            fixed_content = sanitize_response(envelope)
            if not fixed_content:
                raise EmptyFixError("Generation service returned no usable content")
        except ServiceUnavailableError as e:
            return self._fail(session, diagnostic, FixStatus.SERVICE_UNAVAILABLE, str(e))
        except MalformedResponseError as e:
            return self._fail(session, diagnostic, FixStatus.MALFORMED_RESPONSE, str(e))
        except EmptyFixError as e:
            return self._fail(session, diagnostic, FixStatus.EMPTY_FIX, str(e))
        except Exception as e:
            log.exception("fix_unexpected_error", location=diagnostic.location, error=str(e))
            return self._fail(session, diagnostic, FixStatus.ERROR, str(e))

        if self._dry_run:
            outcome = FixOutcome(diagnostic=diagnostic, status=FixStatus.WOULD_APPLY)
            session.record_success(outcome, fixed_content)
            log.info(
                LogEventNames.FIX_DRY_RUN,
                rule=diagnostic.rule,
                line=diagnostic.line,
                changed=fixed_content != request.file_content,
                would_apply=session.would_apply_count,
            )
            return outcome

        try:
            self._loader.write(session.path, fixed_content)
        except (OSError, UnicodeError) as e:
            return self._fail(session, diagnostic, FixStatus.WRITE_FAILED, str(e))
        except Exception as e:
            log.exception("write_unexpected_error", location=diagnostic.location, error=str(e))
            return self._fail(session, diagnostic, FixStatus.WRITE_FAILED, str(e))

        outcome = FixOutcome(diagnostic=diagnostic, status=FixStatus.APPLIED)
        session.record_success(outcome, fixed_content)
        log.info(
            LogEventNames.FIX_APPLIED,
            rule=diagnostic.rule,
            line=diagnostic.line,
            applied=session.applied_count,
        )
        return outcome

    def _fail(
        self,
        session: FileFixSession,
        diagnostic: Diagnostic,
        status: FixStatus,
        error: str,
    ) -> FixOutcome:
        outcome = FixOutcome(diagnostic=diagnostic, status=status, error=error)
        session.record_failure(outcome)
        log.warning(
            LogEventNames.FIX_FAILED,
            rule=diagnostic.rule,
            line=diagnostic.line,
            status=status.value,
            error=error,
            failed=session.failed_count,
        )
        return outcome
