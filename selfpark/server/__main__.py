# selfpark/server/__main__.py
"""python -m selfpark.server [--host H] [--port P]"""

from __future__ import annotations

import argparse
import asyncio
import signal

import uvicorn

from .config import settings


async def serve(host: str, port: int) -> None:
    from . import create_app
    from .sse import sse_manager

    server = uvicorn.Server(uvicorn.Config(create_app(), host=host, port=port, log_level=settings.LOG_LEVEL.lower()))

    def stop() -> None:
        # Open SSE streams would otherwise hold the graceful shutdown.
        sse_manager.close_all()
        server.should_exit = True

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop)

    await server.serve()


def main() -> None:
    parser = argparse.ArgumentParser(prog="selfpark-server", description="Live telemetry for SelfPark runs")
    parser.add_argument("--host", default=settings.HOST)
    parser.add_argument("--port", type=int, default=settings.PORT)
    args = parser.parse_args()
    asyncio.run(serve(args.host, args.port))


if __name__ == "__main__":
    main()
