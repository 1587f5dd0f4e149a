import sys
import os
from loguru import logger

# Custom levels: (name, severity, icon, color)
CUSTOM_LEVELS = (
    ("VISUAL", 8, "🔍", "<magenta>"),
    ("LAYOUT", 9, "📅", "<magenta>"),
)


def register_levels() -> None:
    """
    Register the custom levels once per process. Loguru refuses to redefine
    the severity of an existing level, so known levels are left alone.
    """
    for name, no, icon, color in CUSTOM_LEVELS:
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=no, icon=icon, color=color)


def configure_logging(
    *,
    level: str = "INFO",
    colorize: bool = True,
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <7}</level> | "
        "{message}"
    ),
):
    """
    Parameters:
    - level: minimum log level to output (e.g., "DEBUG", "INFO", "LAYOUT").
    - colorize: whether to use ANSI colors in the console.
    - format: Loguru format string for console output.
    """
    env_level = os.getenv("APP_LOG_LEVEL", "").upper()
    env_colorize = os.getenv("APP_LOG_COLORIZE", "").lower()
    env_format = os.getenv("APP_LOG_FORMAT", "")

    effective_level = env_level if env_level else (level or "INFO")
    effective_colorize = env_colorize in ("1", "true", "yes") if env_colorize else colorize
    effective_format = env_format if env_format else format

    logger.remove()
    register_levels()

    logger.add(
        sys.stdout,
        level=effective_level,
        colorize=effective_colorize,
        format=effective_format,
        enqueue=True,
    )
    return effective_level


register_levels()
