# core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("API_URL", "http://localhost:3001/api")
SOCKET_URL = os.getenv("SOCKET_URL", "http://localhost:3001")
PUBLIC_MENU_URL = os.getenv("PUBLIC_MENU_URL", "http://localhost:5173")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///restaurant_client.db")

SESSION_CHECK_INTERVAL = int(os.getenv("SESSION_CHECK_INTERVAL", "60"))
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

SOCKET_RECONNECT_ATTEMPTS = int(os.getenv("SOCKET_RECONNECT_ATTEMPTS", "10"))
SOCKET_RECONNECT_DELAY = float(os.getenv("SOCKET_RECONNECT_DELAY", "1"))
SOCKET_RECONNECT_DELAY_MAX = float(os.getenv("SOCKET_RECONNECT_DELAY_MAX", "5"))
SOCKET_TIMEOUT = float(os.getenv("SOCKET_TIMEOUT", "20"))

DEFAULT_TAX_PERCENTAGE = float(os.getenv("DEFAULT_TAX_PERCENTAGE", "5"))
RECENT_ORDER_HOURS = int(os.getenv("RECENT_ORDER_HOURS", "2"))
CUSTOMER_ORDER_HOURS = int(os.getenv("CUSTOMER_ORDER_HOURS", "3"))

CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
RESTAURANT_NAME = os.getenv("RESTAURANT_NAME", "SkyBar Cafe & Lounge")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
