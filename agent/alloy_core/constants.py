"""
Constants: version, retry policy, Alloy field names, exit codes.
"""

AGENT_VERSION = "1.0.0"

# ─── Retry ───────────────────────────────────────────────────────
RETRY_DELAY_SEC = 10           # Fixed wait between attempts (no backoff growth)
DEFAULT_MAX_TRIES = 5          # <= 0 means retry forever

# ─── Endpoints ───────────────────────────────────────────────────
TOKEN_ENDPOINT = "token"
COMPUTERS_CLASS = "Computers"
ATTACHMENTS_ENDPOINT = "Object/{object_id}/Attachments"
GRANT_TYPE = "client_credentials"

# ─── Computer record fields ──────────────────────────────────────
FIELD_ID = "ID"
FIELD_AUDIT_ID = "Audit_ID"
FIELD_SERIAL = "Serial_Num"
FIELD_TYPE = "Type"
FIELD_STATUS = "Status"

OP_EQUAL = "="
OP_NOT_EQUAL = "<>"
SORT_DESC = "desc"

COMPUTER_TYPES = ("Desktop", "Laptop")
INACTIVE_STATUSES = ("Inactive", "Missing", "Retired")

# Serials some OEMs leave in the BIOS instead of a real value (lowercase).
PLACEHOLDER_SERIALS = frozenset({
    "",
    "0",
    "none",
    "default string",
    "to be filled by o.e.m.",
    "system serial number",
    "not specified",
    "not applicable",
})

# ─── Exit codes ──────────────────────────────────────────────────
EXIT_OK = 0
EXIT_NO_RESPONSE_DATA = 1
EXIT_API_FAILURE = 2
EXIT_CALL_INTERRUPTED = 3
EXIT_UPLOAD_FAILED = 4
EXIT_UPLOAD_INTERRUPTED = 5
EXIT_NOT_FOUND = 6
EXIT_CONFIG_ERROR = 7
