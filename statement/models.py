from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Lenient(BaseModel):
    """Statement data is hand-edited JSON: unknown keys pass through, every field is optional."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class StatementMeta(_Lenient):
    statementNumber: Optional[str] = None
    accountNumber: Optional[str] = None
    statementPeriod: Optional[str] = None
    statementDate: Optional[str] = None
    pageCount: Optional[str | int] = None


class StatementDocument(_Lenient):
    title: Optional[str] = None
    companyName: Optional[str] = None
    companyDescription: Optional[str] = None
    supportEmail: Optional[str] = None
    brandInitial: Optional[str] = None
    meta: Optional[StatementMeta] = None
    qrCode: Optional[str] = None
    qrAltText: Optional[str] = None
    legalNotice: Optional[str] = None
    extendedLegalNotice: Optional[str] = None
    pageCount: Optional[str | int] = None


class Recipient(_Lenient):
    addressLines: Optional[List[Optional[str]]] = Field(default_factory=list)


class Balances(_Lenient):
    """Raw amounts; formatting happens when tokens are built."""
    opening: Optional[float] = None
    withdrawals: Optional[float] = None
    deposits: Optional[float] = None
    closingLabel: Optional[str] = None
    closing: Optional[float] = None


class Transaction(_Lenient):
    postedDate: Optional[str] = None
    transactionDate: Optional[str] = None
    cardId: Optional[str] = None
    details: Optional[str] = None
    withdrawals: Optional[float] = None
    deposits: Optional[float] = None
    balance: Optional[float] = None


class SummaryRow(_Lenient):
    label: Optional[str] = None
    amount: Optional[float] = None
    note: Optional[str] = None
    emphasized: Optional[bool] = False
    divider: Optional[bool] = False


class StatementData(_Lenient):
    """Shape of data.json as consumed by the bundled template."""
    document: Optional[StatementDocument] = None
    recipient: Optional[Recipient] = None
    balances: Optional[Balances] = None
    summary: Optional[List[SummaryRow]] = Field(default_factory=list)
    transactions: Optional[List[Transaction]] = Field(default_factory=list)


@dataclass(frozen=True)
class RenderContext:
    """Pagination state for one render pass. Only the pagination controller creates these."""
    is_single_page: bool = False
    page_count: int | None = None


@dataclass(frozen=True)
class CommandCandidate:
    executable: str
    args: tuple[str, ...]
    label: str

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]


class AttemptOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    BAD_OUTPUT = "bad_output"


@dataclass(frozen=True)
class CommandAttempt:
    label: str
    outcome: AttemptOutcome
    reason: str = ""
    exit_status: int | None = None
    stderr: str = ""

    def describe(self) -> str:
        parts = [f" - {self.label}"]
        if self.reason:
            parts.append(f"error={self.reason}")
        if self.exit_status is not None:
            parts.append(f"status={self.exit_status}")
        if self.stderr:
            parts.append(f"stderr={self.stderr}")
        return " ".join(parts)
