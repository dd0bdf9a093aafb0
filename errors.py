from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    account_locked = "account_locked"
    missing_tx_amount = "missing_tx_amount"
    tx_invalid_amount = "tx_invalid_amount"
    not_enough_funds = "not_enough_funds"
    tx_does_not_exist = "tx_does_not_exist"
    tx_not_under_dispute = "tx_not_under_dispute"
    tx_already_under_dispute = "tx_already_under_dispute"
    invalid_dispute = "invalid_dispute"
    client_id_mismatch = "client_id_mismatch"


class LedgerError(Exception):
    """A transaction the ledger refused. State is left untouched."""

    kind: ErrorKind

    def __init__(self, message: str, tx_id: Optional[int] = None, client_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.tx_id = tx_id
        self.client_id = client_id


class AccountLocked(LedgerError):
    kind = ErrorKind.account_locked

    def __init__(self, client_id: int, tx_id: Optional[int] = None):
        super().__init__(f"Account (id: {client_id}) is locked", tx_id=tx_id, client_id=client_id)


class MissingTxAmount(LedgerError):
    kind = ErrorKind.missing_tx_amount

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Transaction (id: {tx_id}) does not have an amount", tx_id, client_id)


class TxInvalidAmount(LedgerError):
    kind = ErrorKind.tx_invalid_amount

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Transaction (id: {tx_id}) has an invalid amount", tx_id, client_id)


class NotEnoughFunds(LedgerError):
    kind = ErrorKind.not_enough_funds

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(
            f"Client does not have enough funds to perform the transaction (id: {tx_id})",
            tx_id,
            client_id,
        )


class TxDoesNotExist(LedgerError):
    kind = ErrorKind.tx_does_not_exist

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Transaction (id: {tx_id}) does not exist", tx_id, client_id)


class TxNotUnderDispute(LedgerError):
    kind = ErrorKind.tx_not_under_dispute

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Transaction (id: {tx_id}) is not under dispute", tx_id, client_id)


class TxAlreadyUnderDispute(LedgerError):
    kind = ErrorKind.tx_already_under_dispute

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(f"Transaction (id: {tx_id}) is already under dispute", tx_id, client_id)


class InvalidDispute(LedgerError):
    kind = ErrorKind.invalid_dispute

    def __init__(self, tx_id: int, client_id: Optional[int] = None):
        super().__init__(
            f"Transaction (id: {tx_id}) cannot be disputed as it is not a deposit",
            tx_id,
            client_id,
        )


class ClientIdMismatch(LedgerError):
    kind = ErrorKind.client_id_mismatch

    def __init__(self, tx_type, tx_id: int, client_id: Optional[int] = None):
        self.tx_type = tx_type
        type_name = getattr(tx_type, "value", tx_type)
        super().__init__(
            f"Client id of {type_name} does not match the client id of the original transaction (tx id: {tx_id})",
            tx_id,
            client_id,
        )


class LedgerInvariantError(RuntimeError):
    """Raised when state the ledger built itself turns out inconsistent."""
