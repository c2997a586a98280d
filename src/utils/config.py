# runtime settings, read once from the environment
import os

DB_PATH = os.getenv("MARKET_DB_PATH", "data/market.sqlite")
SEED_DEMO_DATA = os.getenv("MARKET_SEED_DEMO", "1") == "1"

SESSION_COOKIE_NAME = "market_sid"
SESSION_TTL_HOURS = int(os.getenv("MARKET_SESSION_TTL_HOURS", "24"))
SESSION_COOKIE_SECURE = os.getenv("MARKET_COOKIE_SECURE", "0") == "1"

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
PAYMENT_CURRENCY = os.getenv("MARKET_CURRENCY", "usd")

API_HOST = os.getenv("MARKET_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", "8000"))
CORS_ORIGINS = [
    o.strip() for o in os.getenv("MARKET_CORS_ORIGINS", "*").split(",") if o.strip()
]

# client side
API_BASE_URL = os.getenv("MARKET_API_URL", "http://127.0.0.1:8000")
NOTIFICATION_POLL_SECONDS = 30.0
LOW_STOCK_THRESHOLD = 5
