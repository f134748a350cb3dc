"""
Centralized Logger with Rich Console
====================================
Static logging facade shared by every Fuze component.

Usage:
    from fuze.shared.system.logging import Logger

    Logger.info("[REGISTRY] Preloaded 412 accounts")
    Logger.success("[EXECUTOR] Transaction committed")
    Logger.warning("Something concerning")
    Logger.error("Something broke")
    Logger.section("Vault Operations")
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.text import Text

from config.settings import Settings

LOG_DIR = Settings.LOG_DIR
os.makedirs(LOG_DIR, exist_ok=True)

# Per-run session log file
_run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
log_file = os.path.join(LOG_DIR, f"fuze_{_run_id}.log")

handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=3, encoding='utf-8')
formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
handler.setFormatter(formatter)

file_logger = logging.getLogger("FuzeVault")
file_logger.setLevel(logging.DEBUG)
if not file_logger.handlers:
    file_logger.addHandler(handler)


# =============================================================================
# SOURCE ICONS (for visual scanning)
# =============================================================================

SOURCE_ICONS = {
    "SYSTEM": "🛸",
    "MANAGER": "🏦",
    "REGISTRY": "📚",
    "LOADER": "📥",
    "COMPOSER": "🧩",
    "EXECUTOR": "🔐",
    "SERUM": "📊",
    "SOLEND": "💧",
    "ZETA": "⚡",
}

_console = Console()

# Console style and file level per Logger level
LEVEL_STYLES = {
    "INFO": "cyan",
    "SUCCESS": "green bold",
    "WARNING": "yellow",
    "ERROR": "red bold",
    "DEBUG": "dim",
    "CRITICAL": "red bold reverse",
}

FILE_LEVELS = {
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "DEBUG": logging.DEBUG,
    "CRITICAL": logging.CRITICAL,
}


# =============================================================================
# LOGGER CLASS
# =============================================================================

class Logger:
    """
    Static facade: Rich console line plus the rotating file log.

    Messages may start with a `[SOURCE]` tag; it becomes the source column
    and selects the icon.
    """

    _silent_mode = False

    @staticmethod
    def _is_silent() -> bool:
        return Logger._silent_mode or Settings.SILENT_MODE

    @staticmethod
    def _parse_source(message: str) -> tuple:
        """Split a leading [SOURCE] tag off the message."""
        stripped = message.strip()
        if stripped.startswith("[") and "]" in stripped:
            tag_end = stripped.index("]")
            source = stripped[1:tag_end].upper()
            if 0 < len(source) < 15:
                return source, stripped[tag_end + 1:].strip()
        return "SYSTEM", message

    @staticmethod
    def _format_console(level: str, message: str, source: str) -> None:
        if Logger._is_silent():
            return

        icon = SOURCE_ICONS.get(source, "")
        line = Text()
        line.append(datetime.now().strftime("%H:%M:%S.%f")[:-3] + " ", style="dim")
        line.append(f"| {level:<8} ", style=LEVEL_STYLES.get(level, "white"))
        line.append(f"| {source[:10]:<10} | ", style="dim")
        line.append(f"{icon} {message}" if icon else message)
        _console.print(line)

    @staticmethod
    def _log_to_file(level: int, message: str, source: str = "") -> None:
        file_logger.log(level, f"[{source}] {message}" if source else message)

    @staticmethod
    def _emit(level: str, message: str, prefix: str = "", console: bool = True) -> None:
        source, msg = Logger._parse_source(message)
        if prefix:
            msg = f"{prefix} {msg}"
        if console:
            Logger._format_console(level, msg, source)
        Logger._log_to_file(FILE_LEVELS[level], msg, source)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @staticmethod
    def info(message: str, icon: str = "") -> None:
        Logger._emit("INFO", message, prefix=icon)

    @staticmethod
    def success(message: str) -> None:
        Logger._emit("SUCCESS", message, prefix="✅")

    @staticmethod
    def warning(message: str) -> None:
        Logger._emit("WARNING", message)

    @staticmethod
    def error(message: str) -> None:
        Logger._emit("ERROR", message)

    @staticmethod
    def debug(message: str) -> None:
        """File only."""
        Logger._emit("DEBUG", message, console=False)

    @staticmethod
    def critical(message: str) -> None:
        Logger._emit("CRITICAL", message, prefix="🛑")

    @staticmethod
    def section(title: str) -> None:
        if not Logger._is_silent():
            _console.print()
            _console.rule(f"[bold magenta]{title}[/]", style="dim")
        Logger._log_to_file(logging.INFO, f"=== {title} ===", "SYSTEM")

    @staticmethod
    def set_silent(silent: bool) -> None:
        Logger._silent_mode = silent
