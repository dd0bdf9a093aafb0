from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from models import Account, TransactionRecord


class AccountRepository(ABC):
    @abstractmethod
    def get(self, client_id: int) -> Optional[Account]:
        """Get account. Returns None if it was never referenced."""
        pass

    @abstractmethod
    def get_or_create(self, client_id: int) -> Account:
        """Get account, opening an empty one on first reference."""
        pass

    @abstractmethod
    def all(self) -> List[Account]:
        """All accounts in the order they were opened."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class TransactionRepository(ABC):
    """Deposits and withdrawals that can still be disputed."""

    @abstractmethod
    def get(self, tx_id: int) -> Optional[TransactionRecord]:
        pass

    @abstractmethod
    def store(self, record: TransactionRecord) -> None:
        pass

    @abstractmethod
    def remove(self, tx_id: int) -> Optional[TransactionRecord]:
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class DisputeRepository(ABC):
    """Transactions whose funds are currently held."""

    @abstractmethod
    def contains(self, tx_id: int) -> bool:
        pass

    @abstractmethod
    def add(self, record: TransactionRecord) -> None:
        pass

    @abstractmethod
    def remove(self, tx_id: int) -> Optional[TransactionRecord]:
        """Remove an open dispute. Returns None if there was none."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class InMemoryAccountRepository(AccountRepository):
    def __init__(self):
        self.accounts: Dict[int, Account] = {}

    def get(self, client_id: int) -> Optional[Account]:
        return self.accounts.get(client_id)

    def get_or_create(self, client_id: int) -> Account:
        account = self.accounts.get(client_id)
        if account is None:
            account = Account(client=client_id)
            self.accounts[client_id] = account
        return account

    def all(self) -> List[Account]:
        return list(self.accounts.values())

    def count(self) -> int:
        return len(self.accounts)


class InMemoryTransactionRepository(TransactionRepository):
    def __init__(self):
        self.transactions: Dict[int, TransactionRecord] = {}

    def get(self, tx_id: int) -> Optional[TransactionRecord]:
        return self.transactions.get(tx_id)

    def store(self, record: TransactionRecord) -> None:
        self.transactions[record.tx] = record

    def remove(self, tx_id: int) -> Optional[TransactionRecord]:
        return self.transactions.pop(tx_id, None)

    def count(self) -> int:
        return len(self.transactions)


class InMemoryDisputeRepository(DisputeRepository):
    def __init__(self):
        self.disputes: Dict[int, TransactionRecord] = {}

    def contains(self, tx_id: int) -> bool:
        return tx_id in self.disputes

    def add(self, record: TransactionRecord) -> None:
        self.disputes[record.tx] = record

    def remove(self, tx_id: int) -> Optional[TransactionRecord]:
        return self.disputes.pop(tx_id, None)

    def count(self) -> int:
        return len(self.disputes)
