"""
Logging configuration for LeaveFlow Backend
"""
import logging
import sys

from leaveflow.core.config import settings

# Local runs add the call site; other environments keep lines short for log shipping
LOCAL_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """
    Configure stdout logging from settings

    Workflow modules log through logging.getLogger(__name__) under the
    "leaveflow" namespace and inherit the root level set here.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOCAL_FORMAT if settings.APP_ENV == "local" else DEFAULT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # TestClient requests are logged by httpx at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger("leaveflow").info(
        "Logging configured: level=%s, env=%s, weekend_days=%s, display_tz=%s",
        settings.LOG_LEVEL, settings.APP_ENV, settings.WEEKEND_DAYS, settings.DISPLAY_TZ,
    )
