import logging
import sys
from pathlib import Path

from loguru import logger

from catalog_grader.runtime.context import get_config


def configure_logging() -> None:
    main_config = get_config()
    cfg = main_config.logging
    env = main_config.app.environment

    # Reset loguru and guarantee a default request_id
    logger.remove()
    logger.configure(extra={"request_id": "-"})

    def _ensure_request_id(record):
        record["extra"].setdefault("request_id", "-")

    log = logger.patch(_ensure_request_id)

    fmt_plain = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "[<cyan>{extra[request_id]}</cyan>] | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    is_json_file = cfg.format == "json"
    debug_tracebacks = env != "production"

    # Console: colorized, human-readable
    log.add(
        sys.stderr,
        level=cfg.level,
        format=fmt_plain,
        colorize=True,
        backtrace=debug_tracebacks,
        diagnose=debug_tracebacks,
    )

    # File: JSON or plain, rotated by size
    if cfg.file:
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        log.add(
            str(path),
            level=cfg.level,
            format="{message}" if is_json_file else fmt_plain,
            serialize=is_json_file,
            rotation=f"{cfg.max_size_mb} MB",
            retention=cfg.backup_count,
            compression="zip",
            enqueue=True,
            backtrace=debug_tracebacks,
            diagnose=debug_tracebacks,
        )

    class InterceptHandler(logging.Handler):
        """Redirect standard 'logging' records to loguru."""

        def emit(self, record: logging.LogRecord) -> None:
            # Request logs come from the middleware
            if record.name == "uvicorn.access":
                return
            # The middleware already logged the traceback
            if record.name == "uvicorn.error" and record.levelno >= logging.ERROR:
                return

            try:
                level: str | int = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            logger.opt(depth=2, exception=record.exc_info).bind(
                logger_name=record.name
            ).log(level, record.getMessage())

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.CRITICAL)

    log.bind(
        app_level=cfg.level,
        app_format=cfg.format,
        app_file=cfg.file,
        environment=env,
    ).info("Logging configured")
