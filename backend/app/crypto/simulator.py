"""GBM-based crypto price simulator."""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time

import numpy as np

from .engine import AggregationEngine
from .interface import TickSource
from .models import TrackedPair
from .seed_prices import (
    CROSS_QUOTE_CORR,
    DEFAULT_CORR,
    DEFAULT_PARAMS,
    PAIR_PARAMS,
    SECONDS_PER_YEAR,
    SEED_PRICES,
    STABLE_QUOTE_CORR,
    STABLECOIN_QUOTES,
)

logger = logging.getLogger(__name__)


class GBMSimulator:
    """Geometric Brownian Motion simulator for correlated pair prices.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Where:
        S(t)   = current price
        mu     = annualized drift (expected return)
        sigma  = annualized volatility
        dt     = time step as fraction of a (24/7) year
        Z      = correlated standard normal random variable
    """

    DEFAULT_DT = 1.0 / SECONDS_PER_YEAR  # One-second ticks

    def __init__(
        self,
        pairs: list[TrackedPair],
        dt: float = DEFAULT_DT,
        event_probability: float = 0.001,
    ) -> None:
        self._dt = dt
        self._event_prob = event_probability

        self._pairs: list[TrackedPair] = list(pairs)
        self._prices: dict[str, float] = {}
        self._params: dict[str, dict[str, float]] = {}
        for pair in self._pairs:
            self._prices[pair.id] = SEED_PRICES.get(pair.id, random.uniform(50.0, 300.0))
            self._params[pair.id] = PAIR_PARAMS.get(pair.id, dict(DEFAULT_PARAMS))

        # Cholesky decomposition of the correlation matrix (for correlated moves)
        self._cholesky: np.ndarray | None = self._build_cholesky(self._pairs)

    def step(self) -> dict[str, float]:
        """Advance all pairs by one time step. Returns {pair_id: new_price}."""
        n = len(self._pairs)
        if n == 0:
            return {}

        z_independent = np.random.standard_normal(n)
        if self._cholesky is not None:
            z_correlated = self._cholesky @ z_independent
        else:
            z_correlated = z_independent

        result: dict[str, float] = {}
        for i, pair in enumerate(self._pairs):
            params = self._params[pair.id]
            mu = params["mu"]
            sigma = params["sigma"]

            drift = (mu - 0.5 * sigma**2) * self._dt
            diffusion = sigma * math.sqrt(self._dt) * z_correlated[i]
            self._prices[pair.id] *= math.exp(drift + diffusion)

            # Occasional 1-3% jump
            if random.random() < self._event_prob:
                shock = random.uniform(0.01, 0.03) * random.choice([-1, 1])
                self._prices[pair.id] *= 1 + shock
                logger.debug("Random event on %s: %+.1f%%", pair.id, shock * 100)

            result[pair.id] = self._prices[pair.id]

        return result

    def get_price(self, pair_id: str) -> float | None:
        """Current price for a pair, or None if not simulated."""
        return self._prices.get(pair_id)

    @classmethod
    def _build_cholesky(cls, pairs: list[TrackedPair]) -> np.ndarray | None:
        n = len(pairs)
        if n <= 1:
            return None

        corr = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                rho = cls._pairwise_correlation(pairs[i], pairs[j])
                corr[i, j] = rho
                corr[j, i] = rho

        return np.linalg.cholesky(corr)

    @staticmethod
    def _pairwise_correlation(p1: TrackedPair, p2: TrackedPair) -> float:
        """Correlation between two pairs based on shared base and quote type.

          - Same base, both quoted in dollar stablecoins: 0.95
          - Same base, one stablecoin quote and one crypto quote: 0.5
          - Anything else: 0.3
        """
        if p1.base_asset != p2.base_asset:
            return DEFAULT_CORR
        stable1 = p1.quote_asset in STABLECOIN_QUOTES
        stable2 = p2.quote_asset in STABLECOIN_QUOTES
        if stable1 and stable2:
            return STABLE_QUOTE_CORR
        if stable1 or stable2:
            return CROSS_QUOTE_CORR
        return DEFAULT_CORR


class SimulatorFeed(TickSource):
    """TickSource backed by the GBM simulator.

    Runs a background asyncio task that calls GBMSimulator.step() every
    `update_interval` seconds and feeds each price to the engine as a tick
    for the pair's upstream symbol.
    """

    def __init__(
        self,
        engine: AggregationEngine,
        update_interval: float = 1.0,
        event_probability: float = 0.001,
    ) -> None:
        self._engine = engine
        self._interval = update_interval
        self._event_prob = event_probability
        self._sim: GBMSimulator | None = None
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        pairs = self._engine.registry.list_tracked_pairs()
        self._sim = GBMSimulator(pairs=pairs, event_probability=self._event_prob)
        # Seed the engine so subscribers have prices immediately
        self._emit({pair.id: self._sim.get_price(pair.id) for pair in pairs})
        self._task = asyncio.create_task(self._run_loop(), name="simulator-loop")
        logger.info("Simulator started with %d pairs", len(pairs))

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Simulator stopped")

    def is_connected(self) -> bool:
        return self._task is not None and not self._task.done()

    def _emit(self, prices: dict[str, float | None]) -> None:
        timestamp_ms = int(time.time() * 1000)
        registry = self._engine.registry
        for pair_id, price in prices.items():
            pair = registry.get(pair_id)
            if pair is not None and price is not None:
                self._engine.ingest_tick(pair.upstream_symbol, price, timestamp_ms)

    async def _run_loop(self) -> None:
        """Core loop: step the simulation, feed the engine, sleep."""
        while True:
            try:
                if self._sim:
                    self._emit(self._sim.step())
            except Exception:
                logger.exception("Simulator step failed")
            await asyncio.sleep(self._interval)
