import os

# Database Configuration
# Leave DATABASE_URL unset to run against the in-memory fixture store
DB_URL = os.getenv("DATABASE_URL")
SEED_FIXTURES = os.getenv("SEED_FIXTURES", "true").lower() in ("1", "true", "yes")

# Application Metadata
PROJECT_NAME = "Minima Hotel Inventory"
VERSION = "1.0.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Outbound email endpoint (purchase orders sent to suppliers)
EMAIL_ENDPOINT_URL = os.getenv("EMAIL_ENDPOINT_URL", "http://localhost:3000/api/send-email")
EMAIL_TIMEOUT = float(os.getenv("EMAIL_TIMEOUT", 15))

# Display / domain defaults
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₱")
DEFAULT_EXPIRY_WINDOW_DAYS = int(os.getenv("DEFAULT_EXPIRY_WINDOW_DAYS", 7))
