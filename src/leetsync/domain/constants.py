"""Centralized constants for leetsync.

Protocol header names, defaults and timeouts live here so every layer
imports from a single source of truth.
"""

# ---------- Remote service / HTTP ----------
DEFAULT_API_URL = "http://localhost:8080"
REQUEST_TIMEOUT = 30.0
HOST_TIMEOUT = 5.0

# ---------- Challenge protocol ----------
CHALLENGE_HEADER = "X-Challenge"
CHALLENGE_TOKEN_HEADER = "X-Challenge-Token"
CHALLENGE_RESPONSE_HEADER = "X-Challenge-Response"
DEFAULT_MAX_CHALLENGE_ATTEMPTS = 16

# ---------- Remote endpoints ----------
INSERT_ROW_ENDPOINT = "insert-row"
DELETE_ROW_ENDPOINT = "delete-row"
GET_TABLE_ENDPOINT = "get-table"

# ---------- Completion window ----------
DEFAULT_COMPLETION_WINDOW_HOURS = 24

# ---------- Agent server ----------
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8777
