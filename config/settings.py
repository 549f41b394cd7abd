"""
Central configuration for the network simulator.
All settings can be overridden via environment variables (or a .env file).
"""
import os

from dotenv import load_dotenv

load_dotenv()

# ── Persistence ──────────────────────────────────────────────────────────────
STORAGE_BACKEND = os.getenv("VNS_STORAGE_BACKEND", "memory")   # "memory" or "json"
STORAGE_DIR     = os.getenv("VNS_STORAGE_DIR",     ".vns_state")

# ── Session ──────────────────────────────────────────────────────────────────
DEFAULT_USER          = os.getenv("VNS_DEFAULT_USER",    "jshacker")
DEFAULT_MACHINE       = os.getenv("VNS_DEFAULT_MACHINE", "localhost")
MAX_PASSWORD_ATTEMPTS = int(os.getenv("VNS_MAX_PASSWORD_ATTEMPTS", "1"))

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("VNS_LOG_LEVEL", "INFO").upper()
