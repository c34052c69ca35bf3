# config.py
# Summit Boosting Ticket Bot Configuration
# Replace all IDs with your actual Discord server IDs (or set them in .env)

import os
import re
from dotenv import load_dotenv

from tickets_errors import ConfigurationMissing

load_dotenv()


def _env_int(name: str, default):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        print(f"⚠️ Ignoring non-numeric {name}={value!r}")
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError:
        print(f"⚠️ Ignoring non-numeric {name}={value!r}")
        return default


SERVER_NAME = os.getenv("SERVER_NAME", "Summit Account Boosting")

# ============================================================================
# ROLE IDS
# ============================================================================
ROLE_IDS = {
    "STAFF": _env_int("STAFF_ROLE_ID", 1454948532879491153),
}

# ============================================================================
# CHANNEL/CATEGORY IDS
# ============================================================================
CHANNEL_IDS = {
    "COMMAND": _env_int("COMMAND_CHANNEL_ID", 1455724333333745796),         # Where /price is allowed
    "TICKETS_CATEGORY": _env_int("TICKET_CATEGORY_ID", 1455736127955931272),  # Category for ticket channels
    "STAFF_LOG": _env_int("STAFF_LOG_CHANNEL_ID", 1455724718970634261),     # Operational log channel
    "TRANSCRIPT": _env_int("TRANSCRIPT_CHANNEL_ID", None),                   # Optional, falls back to STAFF_LOG
}

# ============================================================================
# RANK LADDER - lowest -> highest
# ============================================================================
RANKS = [
    "Bronze 1", "Bronze 2", "Bronze 3",
    "Silver 1", "Silver 2", "Silver 3",
    "Gold 1", "Gold 2", "Gold 3",
    "Platinum 1", "Platinum 2", "Platinum 3",
    "Diamond 1", "Diamond 2", "Diamond 3",
    "Onyx 1", "Onyx 2", "Onyx 3",
    "Nemesis",
    "Archnemesis",
]

# ============================================================================
# PRICING
# ============================================================================
# "tiered": base + increment * step index (step 0 is Bronze 1 -> Bronze 2)
# "flat":   per_level for every step
PRICING = {
    "policy": os.getenv("PRICING_POLICY", "tiered"),
    "base": _env_int("PRICING_BASE", 100),
    "increment": _env_int("PRICING_INCREMENT", 10),
    "per_level": _env_int("PRICING_PER_LEVEL", 50),
}

# Roblox keeps 30% of every gamepass sale
FEE_RATIO = _env_float("FEE_RATIO", 0.30)

# ============================================================================
# COOLDOWNS / TIMINGS (seconds)
# ============================================================================
TICKET_COOLDOWN_SECONDS = _env_int("TICKET_COOLDOWN_SECONDS", 60)
QUOTE_COOLDOWN_SECONDS = _env_int("QUOTE_COOLDOWN_SECONDS", 10)  # 0 disables
CLOSE_DELAY_SECONDS = 2
QUOTE_EXPIRY_SECONDS = 60
CANCEL_CLEANUP_SECONDS = 5

# ============================================================================
# STORAGE
# ============================================================================
COOLDOWN_FILE = os.getenv("COOLDOWN_FILE", "ticket_cooldowns.json")
QUOTE_COOLDOWN_FILE = os.getenv("QUOTE_COOLDOWN_FILE", "quote_cooldowns.json")
QUOTE_TOKEN_SECRET = os.getenv("QUOTE_TOKEN_SECRET", "")

# ============================================================================
# COLORS - Embed colors (Discord color codes)
# ============================================================================
COLORS = {
    "PRIMARY": 0x5865F2,    # Discord Blurple
    "SUCCESS": 0x57F287,    # Green
    "WARNING": 0xFEE75C,    # Yellow
    "DANGER": 0xED4245,     # Red
}

RESPECT_TEXT = (
    "Keep in mind that our employees/boosters spend the time they should be doing other stuff in to come and help you. "
    "Please be respectful and abide by the rules. You must pay first using a gamepass, and then we will start the boosting process. "
    "If our employees need to leave, do not argue, as it is up to them if they want to leave. Enjoy your boosting!"
)

CLOSE_PHRASE = "CLOSE TICKET"
OWNER_TAG_PREFIX = "ticket_owner:"

_SNOWFLAKE_RE = re.compile(r"^[0-9]{15,21}$")


def is_snowflake(value) -> bool:
    """True when value looks like a Discord id"""
    if value is None or isinstance(value, bool):
        return False
    return bool(_SNOWFLAKE_RE.match(str(value).strip()))


def require_snowflake(name: str, value) -> int:
    if not is_snowflake(value):
        raise ConfigurationMissing(name, f"got {value!r}")
    return int(str(value).strip())


def staff_ping() -> str:
    staff_role_id = ROLE_IDS.get("STAFF")
    return f"<@&{staff_role_id}>" if is_snowflake(staff_role_id) else "@staff"
