from __future__ import annotations

import socket
import sys
from typing import Any

import structlog
import uvicorn
from pydantic import ValidationError

from uptime_guardian.config import Settings, get_settings
from uptime_guardian.main import create_app
from uptime_guardian.observability.logging import configure_logging


log = structlog.get_logger("uptime_guardian.server")


class GuardianServer(uvicorn.Server):
    """uvicorn server that announces its listening address once bound."""

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        if self.started and not self.should_exit:
            log.info(f"Server listening on http://localhost:{self.bound_port()}")

    def bound_port(self) -> int:
        # Reports the real port when PORT=0 asked the OS to pick one.
        for server in getattr(self, "servers", None) or []:
            for sock in server.sockets or ():
                address: Any = sock.getsockname()
                if isinstance(address, tuple) and len(address) >= 2:
                    return int(address[1])
        return self.config.port


def build_server(settings: Settings) -> GuardianServer:
    config = uvicorn.Config(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        # RequestContextMiddleware writes the access log.
        access_log=False,
        log_config=None,
        log_level=settings.log_level.lower(),
    )
    return GuardianServer(config)


def run(settings: Settings | None = None) -> int:
    """Serve until shutdown. Returns the process exit status."""

    try:
        settings = settings or get_settings()
    except ValidationError as exc:
        configure_logging()
        log.error("invalid_configuration", errors=exc.errors(include_url=False))
        return 1

    configure_logging(settings.log_level, settings.log_format)
    server = build_server(settings)

    try:
        server.run()
    except SystemExit as exc:
        # uvicorn raises SystemExit (status varies by release) when the socket cannot be bound.
        log.error("server_startup_failed", host=settings.host, port=settings.port, uvicorn_exit=exc.code)
        return 1

    if not server.started:
        log.error("server_startup_failed", host=settings.host, port=settings.port)
        return 1
    return 0


def main() -> None:
    sys.exit(run())
