import logging
import warnings

import structlog


def configure_logging():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    # sendgrid's http client logs every request at INFO
    logging.getLogger("python_http_client").setLevel(logging.WARNING)

    # Suppress a known PendingDeprecationWarning from starlette.formparsers about
    # `multipart` import; it's noisy in test output and not actionable for us.
    warnings.filterwarnings(
        "ignore",
        category=PendingDeprecationWarning,
        module=r"starlette\.formparsers",
    )


_configured = False


def get_logger(name: str | None = None):
    global _configured
    if not _configured:
        configure_logging()
        _configured = True
    return structlog.get_logger(name)
