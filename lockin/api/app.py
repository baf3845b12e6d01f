"""
FastAPI application — local companion API for the LockIn browser extension.
Runs on http://127.0.0.1:8766 by default.

Singletons (storage, browser host, alarms, services) live on app.state so that
each call to create_app() produces a fully independent instance with no shared
module-level globals. This makes test isolation straightforward.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..actions.grouping import TabGroupingService
from ..actions.lock_gate import LockGate
from ..actions.tasks import TaskListManager
from ..actions.timer import CountdownTimer
from ..actions.unlock import UnlockFlow
from ..browser.alarms import AlarmScheduler
from ..browser.dispatcher import EventDispatcher
from ..browser.host import BrowserHost
from ..config import Config, config as default_config
from ..registry import DistractionRegistry
from ..storage.store import BrowserStorage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Background alarm loop
# ---------------------------------------------------------------------------

async def _alarm_loop(alarms: AlarmScheduler, interval_ms: int) -> None:
    while True:
        await asyncio.sleep(interval_ms / 1000.0)
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, alarms.tick)
        except Exception:
            logger.exception("Alarm tick failed")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(cfg: Optional[Config] = None) -> FastAPI:
    cfg = cfg or default_config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        storage = BrowserStorage(cfg.store_path)
        host = BrowserHost(cfg.extension_base_url)
        alarms = AlarmScheduler()
        registry = DistractionRegistry(storage.sync)

        grouping = TabGroupingService(host, registry)
        gate = LockGate(
            host, registry, storage.session,
            lock_page=cfg.lock_page,
            extension_scheme=cfg.extension_scheme,
        )

        app.state.storage = storage
        app.state.host = host
        app.state.alarms = alarms
        app.state.services = {
            "registry": registry,
            "grouping": grouping,
            "gate": gate,
            "unlock": UnlockFlow(storage, host),
            "timer": CountdownTimer(
                storage.local, alarms, host,
                alert_page=cfg.alert_page,
                alert_size=(cfg.alert_width, cfg.alert_height),
            ),
            "tasks": TaskListManager(storage.local),
            "dispatcher": EventDispatcher(host, grouping, gate, storage.session),
        }

        alarm_task = asyncio.create_task(_alarm_loop(alarms, cfg.alarm_poll_interval_ms))
        logger.info("LockIn service ready (storage: %s)", cfg.store_path)

        yield

        alarm_task.cancel()
        try:
            await alarm_task
        except asyncio.CancelledError:
            pass

    app = FastAPI(
        title="LockIn",
        description="Local companion service for the LockIn focus extension",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=rf"^{cfg.extension_scheme}://.*$",
        allow_origins=["null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import browser, lock, registry, tasks, timer

    app.include_router(browser.router)
    app.include_router(registry.router)
    app.include_router(lock.router)
    app.include_router(timer.router)
    app.include_router(tasks.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app()
