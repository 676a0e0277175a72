"""Application constants."""

USER_AGENT = "personals-sync/1.0"
SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets.readonly",)

MIRROR_TABLE = "mirror"
SUBMISSIONS_TABLE = "submissions"
TABLES = (MIRROR_TABLE, SUBMISSIONS_TABLE)

MATCHING_STRATEGIES = ("url", "title")
ID_POLICIES = ("synthesized", "explicit_column")
TRUTHY_TOKENS = frozenset({"yes", "true", "1"})
CATEGORY_SEPARATORS = ",;|"
ID_PREFIX = "personal"

DEFAULT_CREDENTIALS_FILE = "google_credentials.json"
DEFAULT_SAMPLE_SIZE = 3

COMMANDS = ("sync", "validate", "inspect-row")
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "table",
    "event",
    "status",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
