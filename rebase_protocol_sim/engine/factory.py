#!/usr/bin/env python3
"""
Controller factory

Wires a RebaseController from validated configuration.
"""

from typing import Callable, Optional

from ..core.controller import RebaseController
from ..core.ledger import TokenLedger
from ..core.oracle import PriceOracle
from .config import PoolConfig, RebaseControllerConfig


def create_controller(
    config: RebaseControllerConfig,
    oracle: PriceOracle,
    clock: Optional[Callable[[], int]] = None,
    ledger: Optional[TokenLedger] = None,
) -> RebaseController:
    """Build a controller; pools still have to be set by the owner"""
    return RebaseController(
        oracle=oracle,
        ledger=ledger,
        clock=clock,
        owner=config.owner,
        reserve_holder=config.reserve_holder,
        initial_supply=config.initial_supply,
        initial_target_price=config.initial_target_price,
        price_increase_rate=config.price_increase_rate,
        max_rebase_rate=config.max_rebase_rate,
        rebase_interval=config.rebase_interval,
        min_twap_window=config.min_twap_window,
        schedule_anchor=config.schedule_anchor,
        advance_epoch_on_zero_delta=config.advance_epoch_on_zero_delta,
    )


def create_configured_controller(
    config: RebaseControllerConfig,
    oracle: PriceOracle,
    asset_pool: PoolConfig,
    usd_pool: PoolConfig,
    clock: Optional[Callable[[], int]] = None,
) -> RebaseController:
    """Build a controller and have the owner configure both price pools"""
    controller = create_controller(config, oracle, clock)
    controller.set_price_pools(config.owner, asset_pool.to_price_pool(), usd_pool.to_price_pool())
    return controller
