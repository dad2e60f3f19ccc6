# src/libs/recovery-common/recovery_common/config.py
import os
from dotenv import load_dotenv

# Load environment variables from a .env file for local development.
load_dotenv()


# Service Identity
SERVICE_NAME = os.getenv("SERVICE_NAME", "recovery-service")
ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# HTTP Host
RECOVERY_SERVICE_HOST = os.getenv("RECOVERY_SERVICE_HOST", "0.0.0.0")
RECOVERY_SERVICE_PORT = int(os.getenv("RECOVERY_SERVICE_PORT", "8010"))

# Standard Recovery Plans (percentages)
RECOVERY_DEFAULT_TARGET_PROFIT_PCT = os.getenv("RECOVERY_DEFAULT_TARGET_PROFIT_PCT", "5")
RECOVERY_DEFAULT_RISE_MARGIN_PCT = os.getenv("RECOVERY_DEFAULT_RISE_MARGIN_PCT", "10")
