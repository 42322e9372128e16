#!/usr/bin/env python3
"""
Token Ledger Tests
"""

import pytest

from rebase_protocol_sim.core.errors import ConfigurationError, InsufficientAllowance, InsufficientBalance
from rebase_protocol_sim.core.ledger import ZERO_ADDRESS, TokenLedger


class TestTokenLedger:

    def setup_method(self):
        self.ledger = TokenLedger()
        self.ledger.mint("reserve", 1000)

    def test_mint_and_burn_move_supply(self):
        self.ledger.mint("alice", 50)
        assert self.ledger.total_supply == 1050
        self.ledger.burn("reserve", 200)
        assert self.ledger.total_supply == 850
        assert self.ledger.balance_of("reserve") == 800

    def test_burn_more_than_balance(self):
        with pytest.raises(InsufficientBalance):
            self.ledger.burn("reserve", 1001)
        assert self.ledger.total_supply == 1000

    def test_transfer(self):
        self.ledger.transfer("reserve", "alice", 300)
        assert self.ledger.balance_of("alice") == 300
        assert self.ledger.holders() == {"reserve": 700, "alice": 300}
        with pytest.raises(InsufficientBalance):
            self.ledger.transfer("alice", "bob", 301)

    def test_transfer_from_spends_allowance(self):
        self.ledger.approve("reserve", "bob", 100)
        self.ledger.transfer_from("bob", "reserve", "carol", 60)
        assert self.ledger.allowance("reserve", "bob") == 40
        with pytest.raises(InsufficientAllowance):
            self.ledger.transfer_from("bob", "reserve", "carol", 41)

    def test_null_address_rejected(self):
        with pytest.raises(ConfigurationError):
            self.ledger.mint(ZERO_ADDRESS, 1)
        with pytest.raises(ConfigurationError):
            self.ledger.transfer("reserve", "", 1)

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            self.ledger.mint("alice", -1)

    def test_snapshot_restore(self):
        snapshot = self.ledger.snapshot()
        self.ledger.transfer("reserve", "alice", 10)
        self.ledger.burn("reserve", 90)
        self.ledger.restore(snapshot)
        assert self.ledger.total_supply == 1000
        assert self.ledger.balance_of("reserve") == 1000
        assert self.ledger.balance_of("alice") == 0

    def test_transfer_listeners(self):
        seen = []
        self.ledger.on_transfer(lambda sender, recipient, amount: seen.append((sender, recipient, amount)))
        self.ledger.mint("alice", 5)
        self.ledger.burn("alice", 2)
        assert seen == [(ZERO_ADDRESS, "alice", 5), ("alice", ZERO_ADDRESS, 2)]
