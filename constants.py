import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", None)

# "redis" or "static"
IDENTITY_BACKEND = os.getenv("IDENTITY_BACKEND", "redis")
# token:user_id:username,token:user_id:username
STATIC_TOKENS = os.getenv("STATIC_TOKENS", "")

DEFAULT_ROOM = os.getenv("DEFAULT_ROOM", "main")
PRUNE_EMPTY_ROOMS = os.getenv("PRUNE_EMPTY_ROOMS", "true").lower() not in ("0", "false", "no")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

SEND_QUEUE_SIZE = int(os.getenv("SEND_QUEUE_SIZE", 256))
MAX_TOKEN_LENGTH = 512
