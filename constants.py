import os

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", None)
REDIS_DB = int(os.getenv("REDIS_DB", 0))

# Fixed upgrade path for the collaborative-session relay
WS_PATH = os.getenv("WS_PATH", "/ws")

# Seconds a join waits on the session store before failing closed
SESSION_LOOKUP_TIMEOUT = float(os.getenv("SESSION_LOOKUP_TIMEOUT", 5.0))
