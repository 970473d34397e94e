"""Configuration constants for Export Analyzer."""

import logging
from pathlib import Path

import pytz

# Directory configuration
INPUT_DIR = Path("input")

# Logging configuration
DEFAULT_LOG_LEVEL = logging.INFO
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

DEFAULT_ENCODING = 'utf-8'

# Timezone used for hour-of-day buckets (calendar days are always UTC)
DEFAULT_TIMEZONE_NAME = "UTC"
DEFAULT_TIMEZONE = pytz.timezone(DEFAULT_TIMEZONE_NAME)

# Files that must never be processed, whatever their shape
SKIP_FILE_NAMES = {
    'ai_conversations.json',
    'secret_conversations.json',
    'reported_conversations.json',
}

# Analytics sizes
DAY_MS = 86400000
TREND_WINDOW_DAYS = 30
TREND_FLAT_THRESHOLD_PCT = 3
TOP_CONVERSATIONS = 10
TOP_EMOJIS = 15
TOP_WORDS = 20
TOP_SAVES = 10
TOP_COMMENTS = 10
TOP_TOPICS = 20
TOP_LOCATIONS = 10
TOP_IPS = 10

# Coordinates are rounded to this many decimals when counting unique locations
LOCATION_PRECISION = 2

# Latest instant every timezone can still represent (9999-12-30T23:59:59.999Z).
# Timestamps outside 0..MAX_TIMESTAMP_MS are treated as missing.
MAX_TIMESTAMP_MS = 253402214399999

# Profile change types surfaced in the security report
PROFILE_CHANGE_TYPES = {
    'Name', 'Username', 'Email', 'Phone Number', 'Bio', 'Website',
    'Gender', 'Private Account', 'Profile Photo', 'Password',
}
