"""
Out-of-process WeasyPrint calls: PDF generation and page counting.

Commands are tried in a fixed order. A candidate whose executable does not
exist falls through to the next one; any other failure stops the search, since
a weaker fallback would only hide the real error. Every failed attempt is kept
so the operator sees the whole chain, not just the last error.
"""
from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from config import RendererSettings
from errors import RendererUnavailableError
from models import AttemptOutcome, CommandAttempt, CommandCandidate

_LOG = logging.getLogger(__name__)

PAGE_COUNT_SCRIPT = "\n".join(
    [
        "from weasyprint import HTML",
        "import sys",
        "",
        "html_path = sys.argv[1]",
        "document = HTML(filename=html_path).render()",
        "print(len(document.pages))",
    ]
)

Runner = Callable[..., subprocess.CompletedProcess]


@dataclass
class GatewayResult:
    succeeded: CommandAttempt | None = None
    failures: list[CommandAttempt] = field(default_factory=list)
    stdout: str = ""
    page_count: int | None = None

    @property
    def ok(self) -> bool:
        return self.succeeded is not None

    def failure_details(self) -> str:
        return "\n".join(a.describe() for a in self.failures)


def _split_override(raw: str | None) -> list[str]:
    return (raw or "").split()


def _dedupe(candidates: list[CommandCandidate]) -> list[CommandCandidate]:
    seen: set[tuple[str, ...]] = set()
    unique = []
    for c in candidates:
        key = tuple(c.argv)
        if key in seen:
            continue
        seen.add(key)
        unique.append(c)
    return unique


def _interpreters() -> list[str]:
    """Interpreters for the ``-m weasyprint`` and ``-c`` forms, in the order they are tried."""
    return [exe for exe in ("python", "py", sys.executable) if exe]


def resolve_render_candidates(
    input_path: Path | str,
    output_path: Path | str,
    settings: RendererSettings,
) -> list[CommandCandidate]:
    """WEASYPRINT_BIN override, then ``weasyprint``, then ``<python> -m weasyprint`` forms."""
    base_args = (str(input_path), str(output_path))
    candidates: list[CommandCandidate] = []

    override = _split_override(settings.weasyprint_bin)
    if override:
        candidates.append(
            CommandCandidate(
                executable=override[0],
                args=(*override[1:], *base_args),
                label=f"WEASYPRINT_BIN ({settings.weasyprint_bin})",
            )
        )
    candidates.append(CommandCandidate(executable="weasyprint", args=base_args, label="weasyprint"))
    for exe in _interpreters():
        candidates.append(
            CommandCandidate(executable=exe, args=("-m", "weasyprint", *base_args), label=f"{exe} -m weasyprint")
        )
    return _dedupe(candidates)


def resolve_page_count_candidates(html_path: Path | str, settings: RendererSettings) -> list[CommandCandidate]:
    """WEASYPRINT_PYTHON override, then ``python``, ``py`` and the running interpreter."""
    script_args = ("-c", PAGE_COUNT_SCRIPT, str(html_path))
    candidates: list[CommandCandidate] = []

    override = _split_override(settings.weasyprint_python)
    if override:
        candidates.append(
            CommandCandidate(
                executable=override[0],
                args=(*override[1:], *script_args),
                label=f"WEASYPRINT_PYTHON ({settings.weasyprint_python})",
            )
        )
    for exe in _interpreters():
        candidates.append(CommandCandidate(executable=exe, args=script_args, label=exe))
    return _dedupe(candidates)


def _parse_page_count(stdout: str) -> int | None:
    lines = [line.strip() for line in stdout.splitlines() if line.strip()]
    if not lines:
        return None
    try:
        return int(lines[-1])
    except ValueError:
        return None


class WeasyPrintGateway:
    """Runs command candidates in order; ``run`` is ``subprocess.run`` outside of tests."""

    def __init__(self, settings: RendererSettings, run: Runner | None = None):
        self.settings = settings
        self._run = run or subprocess.run

    def _attempt(self, candidate: CommandCandidate, capture: bool) -> tuple[CommandAttempt, str]:
        timeout = self.settings.render_timeout
        try:
            result = self._run(
                candidate.argv,
                capture_output=capture,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as e:
            return CommandAttempt(candidate.label, AttemptOutcome.NOT_FOUND, reason=str(e)), ""
        except subprocess.TimeoutExpired:
            reason = f"timed out after {timeout:g}s" if timeout else "timed out"
            return CommandAttempt(candidate.label, AttemptOutcome.TIMED_OUT, reason=reason), ""
        except OSError as e:
            return CommandAttempt(candidate.label, AttemptOutcome.FAILED, reason=str(e)), ""

        stderr = (result.stderr or "").strip() if capture else ""
        if result.returncode != 0:
            return (
                CommandAttempt(
                    candidate.label,
                    AttemptOutcome.FAILED,
                    reason="command exited with an error",
                    exit_status=result.returncode,
                    stderr=stderr,
                ),
                "",
            )
        return CommandAttempt(candidate.label, AttemptOutcome.SUCCEEDED, exit_status=0), result.stdout or ""

    def run_candidates(self, candidates: list[CommandCandidate], capture: bool = False) -> GatewayResult:
        result = GatewayResult()
        for candidate in candidates:
            _LOG.debug("RENDERER_TRY label=%s argv=%s", candidate.label, candidate.argv[:3])
            attempt, stdout = self._attempt(candidate, capture)
            if attempt.outcome is AttemptOutcome.SUCCEEDED:
                result.succeeded = attempt
                result.stdout = stdout
                return result
            result.failures.append(attempt)
            if attempt.outcome is not AttemptOutcome.NOT_FOUND:
                break
        return result

    def render_pdf(self, input_path: Path | str, output_path: Path | str) -> GatewayResult:
        """Produce the PDF artifact. Raises RendererUnavailableError with every attempt when nothing works."""
        candidates = resolve_render_candidates(input_path, output_path, self.settings)
        result = self.run_candidates(candidates, capture=False)
        if not result.ok:
            raise RendererUnavailableError(result.failures)
        if result.failures:
            _LOG.info(
                "RENDERER_FALLBACK used=%s skipped=%d",
                result.succeeded.label,
                len(result.failures),
            )
        return result

    def count_pages(self, html_path: Path | str) -> GatewayResult:
        """
        Best-effort page count for ``html_path``.

        Never raises: ``page_count`` is None when no interpreter with WeasyPrint
        could be run or its output was not an integer.
        """
        candidates = resolve_page_count_candidates(html_path, self.settings)
        result = self.run_candidates(candidates, capture=True)
        if result.ok:
            page_count = _parse_page_count(result.stdout)
            if page_count is not None:
                result.page_count = page_count
                return result
            # A clean exit with unusable output counts as a failure of that candidate
            bad = CommandAttempt(
                result.succeeded.label,
                AttemptOutcome.BAD_OUTPUT,
                reason=f'unexpected page count output "{result.stdout.strip()}"',
                exit_status=0,
            )
            result.failures.append(bad)
            result.succeeded = None
        if result.failures:
            _LOG.warning(
                "STATEMENT_PAGE_COUNT_UNAVAILABLE assuming multiple pages\n%s",
                result.failure_details(),
            )
        return result
