"""
utils/constants.py

Purpose: Centralized static values

- WhatsApp template identifiers
- Error codes returned to callers
- Validation patterns and defaults

(Prevents hardcoding across the codebase)
"""

import re

# ============================================================
# WHATSAPP TEMPLATE
# ============================================================

DEFAULT_TEMPLATE_NAME = "codigo_de_verificacion"


# ============================================================
# VALIDATION
# ============================================================

# Optional +, first digit 1-9, then 7 to 14 digits (8-15 digits total)
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{7,14}$")

AUTH_CODE_MIN_LENGTH = 4
AUTH_CODE_MAX_LENGTH = 16


# ============================================================
# ERROR CODES
# ============================================================

ERROR_UNAUTHORIZED = "UNAUTHORIZED"
ERROR_PHONE_INVALID = "PHONE_INVALID"
ERROR_BODY_INVALID = "BODY_INVALID"
ERROR_WATI = "WATI_ERROR"
ERROR_FETCH_FAILED = "FETCH_FAILED"
ERROR_RATE_LIMITED = "RATE_LIMITED"
ERROR_INTERNAL = "INTERNAL_ERROR"

STATUS_FORWARDED = "FORWARDED"


# ============================================================
# HTTP
# ============================================================

# Paths served without the bearer token
PUBLIC_PATHS = frozenset({"/health", "/"})

DEFAULT_ENTRY_TOKEN = "MI_TOKEN_SECRETO"
DEFAULT_PORT = 8080

# 500 requests per 1000 ms, shared by all clients
DEFAULT_RATE_LIMIT_MAX = 500
DEFAULT_RATE_LIMIT_WINDOW_MS = 1000

DEFAULT_FORWARD_TIMEOUT_SECONDS = 30.0

# Requests slower than this are logged as warnings
SLOW_REQUEST_SECONDS = 5.0
