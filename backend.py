## Redis Schema / Keys

# Sessions and profiles are written by the auth service; this side only reads.
# - `auth:token:{token}` — string, the user id the session belongs to (TTL owned by the auth service)
# - `user:{userId}` — hash, public profile (`username`, ...)
#
# Room and presence state is NOT stored here. It lives in process memory
# (see registry.py) and is gone on restart.
import redis
from typing import Optional
from constants import REDIS_HOST, REDIS_PORT, REDIS_PASSWORD
from redis_keys import AUTH_TOKEN_KEY, USER_KEY
from logging_config import get_logger

logger = get_logger(__name__)


class RedisIdentityBackend:
    def __init__(self, client: Optional[redis.Redis] = None):
        # redis.Redis connects lazily on the first command
        self.redis_client = client if client is not None else redis.Redis(
            host=REDIS_HOST, port=REDIS_PORT, password=REDIS_PASSWORD, decode_responses=True
        )
        logger.info(f"Initializing RedisIdentityBackend with connection to {REDIS_HOST}:{REDIS_PORT}")

    def ping(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError as e:
            logger.error(f"Failed to reach Redis at {REDIS_HOST}:{REDIS_PORT}: {e}")
            return False

    def verify_token(self, token: str) -> Optional[str]:
        """Return the user id a session token belongs to, or None."""
        key = AUTH_TOKEN_KEY.format(token=token)
        user_id = self.redis_client.get(key)
        if not user_id:
            logger.debug("Token not found in Redis")
            return None
        return user_id

    def get_user(self, user_id: str) -> Optional[dict]:
        logger.debug(f"Fetching profile for user {user_id}")
        key = USER_KEY.format(user_id=user_id)
        profile = self.redis_client.hgetall(key)
        if not profile:
            logger.debug(f"User {user_id} not found in Redis")
            return None
        return {"id": user_id, "username": profile.get("username", "")}
