from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum
from typing import Dict, Optional
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    localcontext,
)

MAX_CLIENT_ID = 65535
MAX_TX_ID = 4294967295

# 96-bit mantissa with at most 28 fractional digits
MAX_AMOUNT = Decimal(2 ** 96 - 1)
MAX_AMOUNT_SCALE = 28

# add, subtract and compare never round under this context; anything that
# would lose digits raises instead
AMOUNT_CONTEXT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
)


def exact_arithmetic():
    return localcontext(AMOUNT_CONTEXT)


class TransactionType(str, Enum):
    deposit = "deposit"
    withdrawal = "withdrawal"
    dispute = "dispute"
    resolve = "resolve"
    chargeback = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.deposit, TransactionType.withdrawal)


def normalize_amount(value: Decimal) -> Decimal:
    """Drop trailing zeros without switching to exponent notation."""
    with exact_arithmetic():
        normalized = value.normalize()
        if not normalized:
            # also folds -0 into 0
            return Decimal(0)
        if normalized.as_tuple().exponent > 0:
            normalized = normalized.quantize(Decimal(1))
        return normalized


def format_amount(value: Decimal) -> str:
    return format(normalize_amount(value), "f")


class TransactionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: TransactionType = Field(..., description="Transaction type")
    client: int = Field(..., ge=0, le=MAX_CLIENT_ID, description="Client identifier")
    tx: int = Field(..., ge=0, le=MAX_TX_ID, description="Transaction identifier")
    amount: Optional[Decimal] = Field(
        default=None,
        allow_inf_nan=False,
        description="Amount, only meaningful for deposits and withdrawals",
    )

    @field_validator("type", "client", "tx", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("type", mode="before")
    @classmethod
    def lowercase_type(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def blank_amount_is_missing(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
        return v

    @field_validator("amount")
    @classmethod
    def amount_within_range(cls, v):
        if v is None:
            return v
        with exact_arithmetic():
            too_large = abs(v) > MAX_AMOUNT
        if too_large:
            raise ValueError(f"Amount must not exceed {MAX_AMOUNT} in magnitude")
        if -normalize_amount(v).as_tuple().exponent > MAX_AMOUNT_SCALE:
            raise ValueError(f"Amount must have at most {MAX_AMOUNT_SCALE} decimal places")
        return v

    @property
    def has_amount(self) -> bool:
        return self.amount is not None


class Account(BaseModel):
    client: int
    available: Decimal = Decimal(0)
    held: Decimal = Decimal(0)
    locked: bool = False

    @property
    def total(self) -> Decimal:
        with exact_arithmetic():
            return self.available + self.held


class AccountSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    client: int = Field(..., description="Client identifier")
    available: Decimal = Field(..., description="Funds available for withdrawal")
    held: Decimal = Field(..., description="Funds held by open disputes")
    total: Decimal = Field(..., description="available + held")
    locked: bool = Field(..., description="Whether the account was frozen by a chargeback")

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(
            client=account.client,
            available=normalize_amount(account.available),
            held=normalize_amount(account.held),
            total=normalize_amount(account.total),
            locked=account.locked,
        )


class ProcessingReport(BaseModel):
    applied: int = 0
    rejected: int = 0
    skipped: int = Field(default=0, description="Rows that never parsed into a transaction")
    rejections: Dict[str, int] = Field(default_factory=dict)

    @property
    def processed(self) -> int:
        return self.applied + self.rejected

    def record_applied(self) -> None:
        self.applied += 1

    def record_rejected(self, kind: str) -> None:
        self.rejected += 1
        self.rejections[kind] = self.rejections.get(kind, 0) + 1

    def record_skipped(self) -> None:
        self.skipped += 1
