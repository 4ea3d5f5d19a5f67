"""Internal constants shared across the library."""

SOURCE_BASE_URL = "https://couchdb.liftingcast.com"
SOURCE_ORIGIN = "https://liftingcast.com"
USER_AGENT = "livemeet/0.1"

#: Bulk document listing, relative to ``{base_url}/{meet_id}_readonly``.
ALL_DOCS_PATH = "/_all_docs?conflicts=true&include_docs=true"

DEFAULT_POLL_INTERVAL = 15.0
DEFAULT_POLL_MAX_BACKOFF = 120.0
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_SEND_TIMEOUT = 10.0
DEFAULT_PORT = 9001
DEFAULT_FEDERATION = "IPF"

#: Platform clock fallback when neither a live countdown nor a configured
#: timer length is present.
DEFAULT_TIMER_SECONDS = 60.0

DEFAULT_UNITS = "KG"

# ------------------------------------------------------------------
# Document id prefixes
# ------------------------------------------------------------------

MEET_PREFIX = "m"
EXTRA_PREFIX = "e"
DIVISION_PREFIX = "d"
LIFTER_PREFIX = "l"
ATTEMPT_PREFIX = "a"
PLATFORM_PREFIX = "p"
REFEREE_PREFIX = "r"

ATTEMPT_SLOTS: tuple[int, ...] = (1, 2, 3)
