"""Fatal errors for a statement run. Anything not raised as one of these degrades and continues."""
from __future__ import annotations

from models import CommandAttempt


class StatementRenderError(Exception):
    pass


class StatementInputError(StatementRenderError):
    """Data record or template missing, unreadable, or malformed."""


class RendererUnavailableError(StatementRenderError):
    """Every renderer command failed while producing the PDF."""

    def __init__(self, attempts: list[CommandAttempt]):
        self.attempts = list(attempts)
        details = "\n".join(a.describe() for a in self.attempts) or " - (no commands configured)"
        super().__init__(f"Unable to run WeasyPrint. Tried the following commands:\n{details}")
