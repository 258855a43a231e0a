"""Application entrypoint - aiohttp server relaying chat completions."""

import logging

import structlog
from aiohttp.web import Application, run_app

from lobe_relay.api import (
    add_cors_headers,
    auth_middleware,
    chat_completions,
    cors_middleware,
    health,
    index,
    not_found_middleware,
)
from lobe_relay.config import Settings, get_settings
from lobe_relay.transcode import Transcoder
from lobe_relay.upstream import UpstreamClient


def configure_logging(
    log_level: str = "INFO",
    log_file: str = "",
    log_file_max_bytes: int = 10_485_760,
    log_file_backup_count: int = 5,
) -> None:
    """Configure structlog and standard library logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file. Empty string = console only.
        log_file_max_bytes: Max size per log file before rotation (default: 10 MB)
        log_file_backup_count: Number of rotated backup files to keep (default: 5)
    """
    from logging.handlers import RotatingFileHandler
    from pathlib import Path

    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.root
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            filename=log_file,
            maxBytes=log_file_max_bytes,
            backupCount=log_file_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            # JSON lines in files, human-readable on the console
            structlog.processors.JSONRenderer() if log_file else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


async def _close_upstream(app: Application) -> None:
    await app["upstream"].close()


def create_app(settings: Settings | None = None) -> Application:
    """Create and configure the aiohttp application."""
    settings = settings or get_settings()

    transcoder = Transcoder(
        decode_mode=settings.decode_mode,
        sentinel=settings.stream_sentinel,
    )
    upstream = UpstreamClient(settings)
    logger.info(
        "transcoder_configured",
        decode_mode=settings.decode_mode.value,
        sentinel=settings.stream_sentinel,
        upstream_url=settings.upstream_url,
        auth_enabled=bool(settings.auth_token),
    )

    app = Application(
        middlewares=[cors_middleware, not_found_middleware, auth_middleware],
    )
    app["settings"] = settings
    app["transcoder"] = transcoder
    app["upstream"] = upstream
    app.on_response_prepare.append(add_cors_headers)
    app.on_cleanup.append(_close_upstream)

    app.router.add_get("/", index)
    app.router.add_get("/health", health)
    app.router.add_post("/v1/chat/completions", chat_completions)

    return app


def main() -> None:
    """Run the proxy server."""
    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        log_file_max_bytes=settings.log_file_max_bytes,
        log_file_backup_count=settings.log_file_backup_count,
    )

    logger.info(
        "server_starting",
        host=settings.host,
        port=settings.port,
        base_url=f"http://localhost:{settings.port}/v1",
        log_level=settings.log_level,
    )

    app = create_app(settings)
    run_app(app, host=settings.host, port=settings.port, print=None)


if __name__ == "__main__":
    main()
