"""
Chat domain constants.
"""

from datetime import timedelta

# Hard TTL of a chat message, also declared on the MongoDB TTL index
MESSAGE_TTL = timedelta(hours=24)
MESSAGE_TTL_SECONDS = int(MESSAGE_TTL.total_seconds())

# Non-admin authors may only edit within this window
EDIT_WINDOW = timedelta(minutes=15)

MAX_MESSAGE_LENGTH = 1000

DEFAULT_PAGE = 1

# Close code sent to a connection replaced by a newer one for the same identity
WS_CLOSE_SUPERSEDED = 4000

# Largest skip/limit a MongoDB query can carry (signed 64-bit)
MAX_QUERY_INT = 2 ** 63 - 1

# Close code sent to a connection dropped after a failed send
WS_CLOSE_UNREACHABLE = 1011
