#!/usr/bin/env python3
"""
Rebasing Token Ledger

Minimal fungible-token bookkeeping for the rebasing asset:
- balances, allowances, transfers
- mint/burn used by the rebase controller to move total supply
- snapshot/restore so a failed rebase leaves no trace

All amounts are raw integer units (18 decimals by default).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .errors import ConfigurationError, InsufficientAllowance, InsufficientBalance
from .fixed_point import check_uint256

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

TransferListener = Callable[[str, str, int], None]


def is_null_address(address: Optional[str]) -> bool:
    return not address or address == ZERO_ADDRESS


@dataclass(frozen=True)
class LedgerSnapshot:
    """Point-in-time copy of every mutable ledger field"""
    total_supply: int
    balances: Tuple[Tuple[str, int], ...]
    allowances: Tuple[Tuple[Tuple[str, str], int], ...]


class TokenLedger:
    """Balance and supply bookkeeping for the rebasing token"""

    def __init__(self, name: str = "Rebase Token", symbol: str = "RBT", decimals: int = 18):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._total_supply = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._listeners: List[TransferListener] = []

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> Dict[str, int]:
        return {holder: balance for holder, balance in self._balances.items() if balance > 0}

    def on_transfer(self, listener: TransferListener) -> None:
        """Register a callback invoked synchronously after every balance change"""
        self._listeners.append(listener)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._require_address(sender, "sender")
        self._require_address(recipient, "recipient")
        self._require_amount(amount)
        self._debit(sender, amount)
        self._credit(recipient, amount)
        self._notify(sender, recipient, amount)
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self._require_address(owner, "owner")
        self._require_address(spender, "spender")
        self._require_amount(amount)
        self._allowances[(owner, spender)] = amount
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        self._require_amount(amount)
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowance(owner, spender, current, amount)
        self.transfer(owner, recipient, amount)
        self._allowances[(owner, spender)] = current - amount
        return True

    def mint(self, holder: str, amount: int) -> None:
        self._require_address(holder, "mint recipient")
        self._require_amount(amount)
        new_supply = check_uint256(self._total_supply + amount, "total supply")
        self._credit(holder, amount)
        self._total_supply = new_supply
        logger.debug("mint %d to %s, supply now %d", amount, holder, new_supply)
        self._notify(ZERO_ADDRESS, holder, amount)

    def burn(self, holder: str, amount: int) -> None:
        self._require_address(holder, "burn holder")
        self._require_amount(amount)
        self._debit(holder, amount)
        self._total_supply -= amount
        logger.debug("burn %d from %s, supply now %d", amount, holder, self._total_supply)
        self._notify(holder, ZERO_ADDRESS, amount)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            total_supply=self._total_supply,
            balances=tuple(self._balances.items()),
            allowances=tuple(self._allowances.items()),
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self._total_supply = snapshot.total_supply
        self._balances = dict(snapshot.balances)
        self._allowances = dict(snapshot.allowances)

    def _debit(self, holder: str, amount: int) -> None:
        balance = self.balance_of(holder)
        if balance < amount:
            raise InsufficientBalance(holder, balance, amount)
        self._balances[holder] = balance - amount

    def _credit(self, holder: str, amount: int) -> None:
        self._balances[holder] = check_uint256(self.balance_of(holder) + amount, "balance")

    def _notify(self, sender: str, recipient: str, amount: int) -> None:
        for listener in list(self._listeners):
            listener(sender, recipient, amount)

    @staticmethod
    def _require_address(address: Optional[str], label: str) -> None:
        if is_null_address(address):
            raise ConfigurationError(f"{label} is the null address")

    @staticmethod
    def _require_amount(amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Amount must be non-negative, got {amount}")
