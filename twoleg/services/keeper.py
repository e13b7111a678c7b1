"""
Keeper service: the external trigger for arbitrage attempts.

Uses APScheduler to call ArbEngine.attempt_arbitrage for each configured
route at a fixed interval while auto trading is enabled. The engine never
schedules itself; retrying after a failed attempt is the keeper's job.
"""

from typing import Any, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from twoleg.core.config import Settings, get_settings
from twoleg.core.errors import ArbitrageError
from twoleg.core.logging import get_logger
from twoleg.domain.models import AttemptOutcome
from twoleg.services.simulation import Simulation

logger = get_logger("keeper")

JOB_ID = "keeper"


class KeeperService:
    """
    Periodic arbitrage trigger.

    One interval job; APScheduler's max_instances=1 keeps ticks from
    overlapping, the engine's reentrancy lock covers everything else.
    """

    def __init__(
        self,
        simulation: Simulation,
        caller: str,
        deposit: int,
        interval_seconds: int = 15,
        settings: Optional[Settings] = None,
    ):
        self.simulation = simulation
        self.engine = simulation.engine
        self.caller = caller
        self.deposit = deposit
        self.interval_seconds = interval_seconds
        self.settings = settings or get_settings()
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def scheduler(self) -> BackgroundScheduler:
        """Lazy-initialize scheduler."""
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(timezone=self.settings.timezone)
        return self._scheduler

    def run_once(self) -> list[AttemptOutcome]:
        """
        One keeper tick: attempt every route.

        Arbitrage errors are logged and the next route is tried; anything
        else propagates to the scheduler.
        """
        if not self.engine.state.auto_trade_enabled:
            logger.debug("Auto trade disabled, skipping tick")
            return []

        outcomes = []
        for route in self.simulation.routes:
            venue_a = self.simulation.venue(route.venue_a)
            venue_b = self.simulation.venue(route.venue_b)
            try:
                outcome = self.engine.attempt_arbitrage(
                    self.caller, venue_a, venue_b, route.asset, self.deposit,
                )
            except ArbitrageError as e:
                logger.info(f"Route {route.venue_a}->{route.asset}->{route.venue_b}: {e.code}")
                continue

            outcomes.append(outcome)
            logger.info(
                f"Route {route.venue_a}->{route.asset}->{route.venue_b}: {outcome.status.value}"
            )
        return outcomes

    def start(self) -> str:
        """Schedule the interval job and start the scheduler."""
        job = self.scheduler.add_job(
            self.run_once,
            "interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            name=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"Keeper started, every {self.interval_seconds}s")
        return job.id

    def stop(self) -> None:
        """Stop the scheduler."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown()
            logger.info("Keeper stopped")

    def get_jobs(self) -> list[dict[str, Any]]:
        """Get list of scheduled jobs."""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
            })
        return jobs


def create_keeper_service(
    simulation: Simulation,
    config: dict[str, Any],
    settings: Optional[Settings] = None,
) -> KeeperService:
    """Create keeper from the `keeper` section of config.yaml."""
    settings = settings or get_settings()
    keeper_config = config.get("keeper") or {}
    return KeeperService(
        simulation,
        caller=settings.keeper_address,
        deposit=int(keeper_config.get("deposit", 0)),
        interval_seconds=int(keeper_config.get("interval_seconds", 15)),
        settings=settings,
    )
