import os
import logging
import structlog
from logging.handlers import RotatingFileHandler
from arrival_log.config import Settings

LOG_FILE = "app.log"

def setup_logging(settings: Settings):
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(level=level, format="%(message)s")
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if settings.log_dir:
        os.makedirs(settings.log_dir, exist_ok=True)
        log_path = os.path.join(settings.log_dir, LOG_FILE)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))

        if not any(
            isinstance(h, RotatingFileHandler) and h.baseFilename == file_handler.baseFilename
            for h in root_logger.handlers
        ):
            root_logger.addHandler(file_handler)
        else:
            file_handler.close()

    # Configure structlog
    structlog.configure(
        processors=[
            # Add log level to log entry
            structlog.stdlib.filter_by_level,
            # Add logger name
            structlog.stdlib.add_logger_name,
            # Add log level
            structlog.stdlib.add_log_level,
            # Positional arguments are transformed into events
            structlog.stdlib.PositionalArgumentsFormatter(),
            # Format timestamps
            structlog.processors.TimeStamper(fmt="iso"),
            # Stack info processor
            structlog.processors.StackInfoRenderer(),
            # Format exceptions
            structlog.processors.format_exc_info,
            # Decode unicode
            structlog.processors.UnicodeDecoder(),
            # Add file, line, and function info
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            # JSON renderer for production, console for development
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(colors=True)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

def get_logger(name: str):
    return structlog.get_logger(name)
