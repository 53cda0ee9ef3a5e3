"""
backend/main.py

Entry point: builds a MonitoringSession, serves the API with uvicorn and
pushes periodic alert / stats updates to WebSocket clients.

    miawatch --demo --log-level DEBUG

--demo loads the synthetic dataset, trains and starts the simulator so the
dashboard has traffic immediately.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import asdict
from typing import NoReturn

import uvicorn

from .api.main import create_app, set_session
from .api.ws_manager import ws_manager
from .config import settings
from .engine.models import Alert
from .metrics import METRICS
from .session import MonitoringSession

logger = logging.getLogger("miawatch.main")

_ANSI = {
    "CRITICAL": "\033[91m",
    "WARNING":  "\033[93m",
    "RESET":    "\033[0m",
}


def _colour(severity: str, text: str) -> str:
    return f"{_ANSI.get(severity, '')}{text}{_ANSI['RESET']}"


# ---------------------------------------------------------------------------
# Periodic broadcaster
# ---------------------------------------------------------------------------

async def stats_broadcaster(
    session: MonitoringSession,
    shutdown_event: asyncio.Event,
    interval: float = 1.0,
) -> None:
    """Push new alerts and a stats snapshot every *interval* seconds."""
    seen: set[str] = set()
    while not shutdown_event.is_set():
        await asyncio.sleep(interval)

        alerts = session.engine.alerts
        fresh = [a for a in reversed(alerts) if a.alert_id not in seen]
        seen = {a.alert_id for a in alerts}
        for alert in fresh:
            _print_alert(alert)
        await ws_manager.publish_alerts(fresh)

        await ws_manager.publish_stats(
            session.engine.stats, session.engine.get_top_suspicious_users()
        )


def _print_alert(alert: Alert) -> None:
    sev = alert.severity.value
    print(
        f"\n{_colour(sev, f'[ALERT ★ {sev}]')} user={alert.user_id!r} score={alert.score}\n"
        f"  {_colour(sev, ', '.join(alert.triggers))}\n"
        f"  id={alert.alert_id[:8]}\n",
        flush=True,
    )


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

async def _stop_session(session: MonitoringSession) -> None:
    """Stop the simulator and training, then wait for the simulator task to exit."""
    session.stop_monitoring()
    session.cancel_training()
    await session.wait_monitoring_stopped()


async def run(host: str, port: int, demo: bool) -> None:
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _signal_handler(_signum, _frame) -> None:
        logger.info("Shutdown signal received")
        loop.call_soon_threadsafe(shutdown_event.set)

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    session = MonitoringSession()
    set_session(session)

    if demo:
        session.load_demo_dataset()
        await session.train()
        session.start_monitoring()

    app = create_app()
    uv_config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="warning",
        loop="none",
    )
    uv_server = uvicorn.Server(uv_config)

    tasks = [
        asyncio.create_task(
            stats_broadcaster(session, shutdown_event, settings.STATS_BROADCAST_SECONDS),
            name="stats_ws",
        ),
        asyncio.create_task(uv_server.serve(), name="api"),
    ]

    logger.info("MIAWatch — API=http://%s:%d demo=%s", host, port, demo)

    await shutdown_event.wait()

    uv_server.should_exit = True
    await _stop_session(session)
    for t in tasks[:-1]:
        t.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    logger.info(
        "Final stats — engine=%s metrics=%s",
        asdict(session.engine.stats),
        METRICS.as_dict(),
    )
    logger.info("MIAWatch stopped cleanly")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MIAWatch — query pattern anomaly detector")
    parser.add_argument("--host", default=settings.API_HOST)
    parser.add_argument("--port", type=int, default=settings.API_PORT)
    parser.add_argument(
        "--demo", action="store_true",
        help="load the demo dataset, train and start simulated traffic",
    )
    parser.add_argument(
        "--log-level", default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main() -> NoReturn:
    args = _parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    if not 0 < args.port < 65536:
        print(f"ERROR: invalid --port: {args.port}", file=sys.stderr)
        sys.exit(1)

    asyncio.run(run(host=args.host, port=args.port, demo=args.demo))
    sys.exit(0)


if __name__ == "__main__":
    main()
