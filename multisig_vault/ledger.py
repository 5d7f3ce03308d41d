"""
In-memory host ledger.

Holds integer balances per address, program-owned account data and an
append-only event log. Every engine operation runs inside ``transaction()``,
which serializes callers and restores the previous state if the body raises,
so an operation either commits fully or leaves no trace.

Program-owned accounts (vaults, proposals) must keep ``min_retained_balance``
after any debit; plain accounts may be drained to zero.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .errors import (
    AccountExists,
    AccountNotFound,
    InsufficientFunds,
    InvalidAmount,
    InvalidVault,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class Ledger:
    """Balances, account data and events behind a single write lock"""

    def __init__(self, min_retained_balance: int = 0):
        self.min_retained_balance = min_retained_balance
        self._balances: Dict[str, int] = {}
        self._accounts: Dict[str, Dict[str, Any]] = {}
        self._events: List[Dict[str, Any]] = []
        self._transfer_history: List[Dict[str, Any]] = []
        self._lock = threading.RLock()
        self._depth = 0
        self._undo_balances: Dict[str, Any] = {}
        self._undo_accounts: Dict[str, Any] = {}

    @contextmanager
    def transaction(self) -> Iterator['Ledger']:
        """Apply the enclosed mutations atomically.

        Nested transactions join the outermost one. Writers journal the prior
        value of each balance or account the first time they touch it, and a
        failure restores just those entries.
        """
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._undo_balances = {}
                self._undo_accounts = {}
                marks = (len(self._events), len(self._transfer_history))
            self._depth += 1
            try:
                yield self
            except BaseException:
                if outermost:
                    self._rollback(*marks)
                raise
            finally:
                self._depth -= 1
                if outermost:
                    self._undo_balances = {}
                    self._undo_accounts = {}

    def _rollback(self, n_events: int, n_transfers: int) -> None:
        for address, previous in self._undo_balances.items():
            if previous is _MISSING:
                self._balances.pop(address, None)
            else:
                self._balances[address] = previous
        for address, previous in self._undo_accounts.items():
            if previous is _MISSING:
                self._accounts.pop(address, None)
            else:
                self._accounts[address] = previous
        del self._events[n_events:]
        del self._transfer_history[n_transfers:]
        logger.debug("Rolled back transaction")

    def _set_balance(self, address: str, value: int) -> None:
        if address not in self._undo_balances:
            self._undo_balances[address] = self._balances.get(address, _MISSING)
        self._balances[address] = value

    def _set_account(self, address: str, record: Dict[str, Any]) -> None:
        # records are replaced, never mutated, so the old one is a valid undo copy
        if address not in self._undo_accounts:
            self._undo_accounts[address] = self._accounts.get(address, _MISSING)
        self._accounts[address] = record

    # Balances

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def fund(self, address: str, amount: int) -> int:
        """Mint value into an account (faucet for local use)"""
        if amount <= 0:
            raise InvalidAmount()
        with self.transaction():
            self._set_balance(address, self.balance_of(address) + amount)
            return self._balances[address]

    def available_balance(self, address: str) -> int:
        """Balance that can leave the account without breaching its reserve"""
        balance = self.balance_of(address)
        if address in self._accounts:
            return max(0, balance - self.min_retained_balance)
        return balance

    def transfer(self, from_address: str, to_address: str, amount: int) -> None:
        """Move ``amount`` between accounts, or fail with no effect"""
        if amount <= 0:
            raise InvalidAmount()

        with self.transaction():
            available = self.available_balance(from_address)
            if available < amount:
                raise InsufficientFunds(required=amount, available=available)

            self._set_balance(from_address, self.balance_of(from_address) - amount)
            self._set_balance(to_address, self.balance_of(to_address) + amount)
            self._transfer_history.append({
                'from': from_address,
                'to': to_address,
                'amount': amount,
                'sequence': len(self._transfer_history),
            })

    # Program-owned accounts

    def exists(self, address: str) -> bool:
        return address in self._accounts

    def allocate(self, address: str, kind: str, data: Dict[str, Any], payer: str) -> None:
        """Create a program-owned account; the payer funds its reserve"""
        with self.transaction():
            if address in self._accounts:
                raise AccountExists(f"Account already exists: {address}")
            if self.min_retained_balance:
                available = self.balance_of(payer)
                if available < self.min_retained_balance:
                    raise InsufficientFunds(
                        required=self.min_retained_balance, available=available
                    )
                self._set_balance(payer, available - self.min_retained_balance)
                self._set_balance(address, self.balance_of(address) + self.min_retained_balance)
            self._set_account(address, {'kind': kind, 'data': copy.deepcopy(data)})

    def load(self, address: str, kind: Optional[str] = None) -> Dict[str, Any]:
        """Return a detached copy of an account's data"""
        account = self._accounts.get(address)
        if account is None:
            raise AccountNotFound(f"Account not found: {address}")
        if kind is not None and account['kind'] != kind:
            raise InvalidVault(f"Account {address[:8]}... is not a {kind}")
        return copy.deepcopy(account['data'])

    def store(self, address: str, data: Dict[str, Any]) -> None:
        with self.transaction():
            account = self._accounts.get(address)
            if account is None:
                raise AccountNotFound(f"Account not found: {address}")
            self._set_account(address, {'kind': account['kind'], 'data': copy.deepcopy(data)})

    # Events

    def emit(self, event: str, **fields: Any) -> None:
        with self.transaction():
            record = {'event': event, 'sequence': len(self._events)}
            record.update(fields)
            self._events.append(record)

    def events(self, event: Optional[str] = None) -> List[Dict[str, Any]]:
        if event is None:
            return copy.deepcopy(self._events)
        return [copy.deepcopy(e) for e in self._events if e['event'] == event]

    def get_transfer_history(self) -> List[Dict[str, Any]]:
        return self._transfer_history.copy()
