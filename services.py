from decimal import Decimal
from typing import Iterable, List, Optional
import structlog

from errors import (
    AccountLocked,
    ClientIdMismatch,
    InvalidDispute,
    LedgerError,
    LedgerInvariantError,
    MissingTxAmount,
    NotEnoughFunds,
    TxAlreadyUnderDispute,
    TxDoesNotExist,
    TxInvalidAmount,
    TxNotUnderDispute,
)
from models import (
    Account,
    AccountSummary,
    ProcessingReport,
    TransactionRecord,
    TransactionType,
    exact_arithmetic,
)
from repositories import (
    AccountRepository,
    DisputeRepository,
    InMemoryAccountRepository,
    InMemoryDisputeRepository,
    InMemoryTransactionRepository,
    TransactionRepository,
)

# Configure structured logging
logger = structlog.get_logger()


class Ledger:
    """In-memory state machine driven one transaction at a time.

    Every rejected transaction raises a ``LedgerError`` and leaves balances,
    open transactions and disputes exactly as they were. The only side effect
    that survives a rejection is the lazy creation of the client's account.
    """

    def __init__(
        self,
        accounts: Optional[AccountRepository] = None,
        transactions: Optional[TransactionRepository] = None,
        disputes: Optional[DisputeRepository] = None,
        detailed_logging: bool = False,
    ):
        self.accounts = accounts if accounts is not None else InMemoryAccountRepository()
        self.transactions = transactions if transactions is not None else InMemoryTransactionRepository()
        self.disputes = disputes if disputes is not None else InMemoryDisputeRepository()
        self.detailed_logging = detailed_logging

    def apply(self, record: TransactionRecord) -> None:
        account = self.accounts.get_or_create(record.client)
        if account.locked:
            raise AccountLocked(record.client, tx_id=record.tx)

        # balances are never rounded; a lossy operation raises instead
        with exact_arithmetic():
            if record.type.carries_amount:
                self._apply_movement(account, record)
            else:
                self._apply_dispute_action(account, record)

        if self.detailed_logging:
            logger.debug(
                "Transaction applied",
                type=record.type.value,
                tx_id=record.tx,
                client_id=record.client,
                available=str(account.available),
                held=str(account.held),
                locked=account.locked,
            )

    def snapshot(self) -> List[AccountSummary]:
        return [AccountSummary.from_account(account) for account in self.accounts.all()]

    def _apply_movement(self, account: Account, record: TransactionRecord) -> None:
        """Deposit or withdrawal."""
        if not record.has_amount:
            raise MissingTxAmount(record.tx, record.client)
        amount = record.amount
        if amount <= 0:
            raise TxInvalidAmount(record.tx, record.client)

        if record.type == TransactionType.deposit:
            account.available += amount
        else:
            if account.available < amount:
                raise NotEnoughFunds(record.tx, record.client)
            account.available -= amount

        # ids are unique by contract, a repeated id simply replaces the entry
        self.transactions.store(record)

    def _apply_dispute_action(self, account: Account, record: TransactionRecord) -> None:
        """Dispute, resolve or chargeback against a stored transaction."""
        original = self.transactions.get(record.tx)
        if original is None:
            raise TxDoesNotExist(record.tx, record.client)
        if original.client != record.client:
            raise ClientIdMismatch(record.type, record.tx, record.client)
        amount = self._original_amount(original)

        if record.type == TransactionType.dispute:
            self._dispute(account, original, record, amount)
        elif record.type == TransactionType.resolve:
            self._resolve(account, record, amount)
        elif record.type == TransactionType.chargeback:
            self._chargeback(account, record, amount)
        else:
            raise LedgerInvariantError(f"Unhandled transaction type {record.type!r}")

    def _dispute(
        self,
        account: Account,
        original: TransactionRecord,
        record: TransactionRecord,
        amount: Decimal,
    ) -> None:
        if original.type != TransactionType.deposit:
            raise InvalidDispute(record.tx, record.client)
        if self.disputes.contains(record.tx):
            raise TxAlreadyUnderDispute(record.tx, record.client)

        # may push available below zero if the deposit was already withdrawn
        account.available -= amount
        account.held += amount
        self.disputes.add(record)

    def _resolve(self, account: Account, record: TransactionRecord, amount: Decimal) -> None:
        if self.disputes.remove(record.tx) is None:
            raise TxNotUnderDispute(record.tx, record.client)

        account.available += amount
        account.held -= amount

    def _chargeback(self, account: Account, record: TransactionRecord, amount: Decimal) -> None:
        if self.disputes.remove(record.tx) is None:
            raise TxNotUnderDispute(record.tx, record.client)

        account.held -= amount
        account.locked = True
        self.transactions.remove(record.tx)

        logger.info(
            "Account locked after chargeback",
            client_id=record.client,
            tx_id=record.tx,
            amount=str(amount),
        )

    @staticmethod
    def _original_amount(original: TransactionRecord) -> Decimal:
        if original.amount is None:
            raise LedgerInvariantError(
                f"Stored transaction {original.tx} has no amount"
            )
        return original.amount


def process_transactions(
    records: Iterable[TransactionRecord],
    ledger: Ledger,
    report: Optional[ProcessingReport] = None,
) -> ProcessingReport:
    """Apply records in order; rejections are logged and skipped."""
    if report is None:
        report = ProcessingReport()

    for record in records:
        try:
            ledger.apply(record)
        except LedgerError as e:
            logger.warning(
                "Transaction rejected",
                kind=e.kind.value,
                type=record.type.value,
                tx_id=record.tx,
                client_id=record.client,
                error=e.message,
            )
            report.record_rejected(e.kind.value)
            continue

        report.record_applied()

    logger.info(
        "Transactions processed",
        applied=report.applied,
        rejected=report.rejected,
        skipped=report.skipped,
        accounts=ledger.accounts.count(),
    )
    return report


# Factory function for dependency injection
def get_ledger(detailed_logging: bool = False) -> Ledger:
    return Ledger(detailed_logging=detailed_logging)
