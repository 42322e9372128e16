#!/usr/bin/env python3
"""
Rebase Protocol Errors

Every failure aborts the triggering call with no partial state change.
RebaseNotDue is the only expected rejection; keepers call and retry later.
"""

from typing import Optional


class RebaseProtocolError(Exception):
    """Base class for all rebase protocol failures"""


class ConfigurationError(RebaseProtocolError):
    """A required pool or address is unset or null"""


class WindowTooShort(RebaseProtocolError):
    """Requested TWAP window is below the manipulation-resistant minimum"""

    def __init__(self, window: int, minimum: int):
        self.window = window
        self.minimum = minimum
        super().__init__(f"TWAP window {window}s is shorter than minimum {minimum}s")


class OracleUnavailable(RebaseProtocolError):
    """The oracle cannot produce an observation for the requested window"""

    def __init__(self, pool_id: Optional[str], reason: str):
        self.pool_id = pool_id
        self.reason = reason
        super().__init__(f"Oracle unavailable for pool {pool_id!r}: {reason}")


class RebaseNotDue(RebaseProtocolError):
    """Timing guard not satisfied yet"""

    def __init__(self, now: int, next_rebase_time: int):
        self.now = now
        self.next_rebase_time = next_rebase_time
        super().__init__(
            f"Rebase not due: now={now}, next eligible at {next_rebase_time} "
            f"({next_rebase_time - now}s remaining)"
        )


class ArithmeticOverflow(RebaseProtocolError, ArithmeticError):
    """An intermediate value left the 256-bit range or divided by zero"""


class ReentrantRebase(RebaseProtocolError):
    """A rebase was triggered while another rebase on the same thread was executing"""


class Unauthorized(RebaseProtocolError):
    """Caller is not the owner"""

    def __init__(self, caller: str):
        self.caller = caller
        super().__init__(f"Caller {caller!r} is not the owner")


class InsufficientBalance(RebaseProtocolError):
    """Ledger holder does not have enough tokens"""

    def __init__(self, holder: str, balance: int, needed: int):
        self.holder = holder
        self.balance = balance
        self.needed = needed
        super().__init__(f"{holder!r} has balance {balance}, needs {needed}")


class InsufficientAllowance(RebaseProtocolError):
    """Spender allowance is lower than the requested amount"""

    def __init__(self, owner: str, spender: str, allowance: int, needed: int):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.needed = needed
        super().__init__(f"{spender!r} may spend {allowance} of {owner!r}, needs {needed}")
