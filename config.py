# Configuration
# API keys, model settings, database and alerting endpoints, domain thresholds

import os
from dotenv import load_dotenv

load_dotenv()

# API Keys
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# Model Settings
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.5-flash")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))

# Warehouse connection (read-only)
DB_HOST = os.getenv("DB_HOST", "")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_NAME = os.getenv("DB_NAME", "")
DB_USER = os.getenv("DB_USER", "")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_SSL = os.getenv("DB_SSL", "false").lower() == "true"
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "10"))

# Owner notifications
ALERT_WEBHOOK_URL = os.getenv("ALERT_WEBHOOK_URL", "")
ALERT_TIMEOUT_SECONDS = float(os.getenv("ALERT_TIMEOUT_SECONDS", "10"))

# Scheduled database refresh
REFRESH_INTERVAL_HOURS = float(os.getenv("REFRESH_INTERVAL_HOURS", "24"))

# All amounts are in a single currency
CURRENCY = "CAD"

# Discrepancies inside +/- this band count as a match
FLAG_TOLERANCE = 0.01

# Severity tiers on absolute customer discrepancy (CAD)
SEVERITY_YELLOW_THRESHOLD = 50.0
SEVERITY_RED_THRESHOLD = 500.0

# Number of red customers listed in a critical alert
ALERT_TOP_CUSTOMERS = 5

# Assistant context sizes
ASSISTANT_TOP_N = 5
ASSISTANT_MAX_CUSTOMERS = 40
CHAT_MESSAGE_MAX_LENGTH = 1000
ASSISTANT_FALLBACK_ANSWER = "Unable to generate a response."

# Source labels
DATABASE_SOURCE_LABEL = "refreshed from database"
UPLOAD_SOURCE_LABEL = "uploaded data"
