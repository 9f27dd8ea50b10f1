# Logger Utility
# Provides consistent logging throughout the application

import logging
import sys
from datetime import datetime

# Create a custom logger
logger = logging.getLogger("DiscrepancyAnalyser")
logger.setLevel(logging.DEBUG)

# Create console handler with formatting
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.DEBUG)


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now().strftime('%H:%M:%S')

        # Add emoji based on log type
        emoji = {
            'DEBUG': '🔍',
            'INFO': '✅',
            'WARNING': '⚠️',
            'ERROR': '❌',
            'CRITICAL': '🔥',
        }.get(record.levelname, '')

        return f"{color}[{timestamp}] {emoji} {record.levelname}: {record.getMessage()}{self.RESET}"


console_handler.setFormatter(ColoredFormatter())

# Avoid duplicate handlers on re-import
if not logger.handlers:
    logger.addHandler(console_handler)


def _preview(value, limit: int = 100) -> str:
    text = str(value)
    return text[:limit] + "..." if len(text) > limit else text


def log_node_start(node_name: str, **kwargs):
    """Log when a pipeline node starts."""
    logger.info(f"🚀 NODE START: {node_name}")
    for key, value in kwargs.items():
        logger.debug(f"   └─ {key}: {value}")


def log_node_end(node_name: str, result: dict = None):
    """Log when a pipeline node ends."""
    logger.info(f"✅ NODE END: {node_name}")
    if result:
        for key, value in result.items():
            if value is not None:
                logger.debug(f"   └─ {key}: {_preview(value)}")


def log_source_call(source_name: str, **params):
    """Log a pull from the bulk row source."""
    logger.info(f"🔧 SOURCE CALL: {source_name}")
    for key, value in params.items():
        logger.debug(f"   └─ {key}: {value}")


def log_source_result(source_name: str, success: bool, data_summary: str = None):
    """Log the outcome of a bulk row pull."""
    if success:
        logger.info(f"📦 SOURCE RESULT: {source_name} - Success")
    else:
        logger.error(f"📦 SOURCE RESULT: {source_name} - Failed")
    if data_summary:
        logger.debug(f"   └─ {data_summary}")


def log_llm_call(agent_name: str, prompt_preview: str = None):
    """Log LLM calls."""
    logger.info(f"🤖 LLM CALL: {agent_name}")
    if prompt_preview:
        logger.debug(f"   └─ Prompt: {_preview(prompt_preview, 200)}")


def log_llm_result(agent_name: str, response_preview: str = None):
    """Log LLM results."""
    logger.info(f"💬 LLM RESULT: {agent_name}")
    if response_preview:
        logger.debug(f"   └─ Response: {_preview(response_preview, 200)}")


def log_error(message: str, error: Exception = None):
    """Log errors."""
    logger.error(f"❌ ERROR: {message}")
    if error:
        logger.error(f"   └─ {type(error).__name__}: {str(error)}")


def log_load_start(source_label: str):
    """Log when a snapshot load starts."""
    logger.info("=" * 60)
    logger.info("🔍 SNAPSHOT LOAD STARTED")
    logger.info("=" * 60)
    logger.info(f"   └─ Source: {source_label}")


def log_load_end(success: bool, rows: int = 0, customers: int = 0):
    """Log when a snapshot load ends."""
    logger.info("=" * 60)
    if success:
        logger.info(f"✅ SNAPSHOT LOAD COMPLETED: {rows} rows, {customers} customers")
    else:
        logger.error("❌ SNAPSHOT LOAD FAILED - previous snapshot retained")
    logger.info("=" * 60)


def log_alert(title: str, critical_count: int):
    """Log a critical-discrepancy alert decision."""
    logger.warning(f"🚨 ALERT: {title}")
    logger.debug(f"   └─ critical customers: {critical_count}")
