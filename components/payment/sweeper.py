"""Background task that expires stale OTP challenges."""

import asyncio
from typing import Optional

from components.core.database import DatabaseManager
from components.core.logging_config import logger
from components.payment.service import PaymentWorkflowService


class OtpExpirySweeper:
    """
    Periodically returns attempts whose challenge ran out to STUDENT_LOOKED_UP.

    Expiry is also applied lazily on every access; the sweep only keeps
    abandoned challenges from piling up.
    """

    def __init__(self, db_manager: DatabaseManager, interval_seconds: int = 60):
        self.db_manager = db_manager
        self.interval_seconds = interval_seconds
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self.running:
            logger.warning("[OtpSweeper] Already running")
            return
        self.running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"[OtpSweeper] Started - interval {self.interval_seconds}s")

    async def stop(self) -> None:
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("[OtpSweeper] Stopped")

    async def sweep(self) -> int:
        async with self.db_manager.get_db() as session:
            expired = await PaymentWorkflowService(session).expire_stale_challenges()
        if expired:
            logger.info(f"[OtpSweeper] Expired {expired} challenge(s)")
        return expired

    async def _loop(self) -> None:
        while self.running:
            try:
                await self.sweep()
            except Exception as e:
                logger.error(f"[OtpSweeper] Sweep failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)
