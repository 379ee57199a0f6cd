import asyncio
from typing import Dict, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from constants import MAX_TOKEN_LENGTH
from errors import AdmissionError
from logging_config import get_logger

logger = get_logger(__name__)


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    username: str


class IdentityProvider(Protocol):
    """Blocking interface of the external identity/auth component."""

    def verify_token(self, token: str) -> Optional[str]:
        ...

    def get_user(self, user_id: str) -> Optional[dict]:
        ...

    def ping(self) -> bool:
        ...


class StaticIdentityProvider:
    """In-process token table. Used for local development and tests."""

    def __init__(self):
        self.tokens: Dict[str, str] = {}
        self.users: Dict[str, dict] = {}

    @classmethod
    def from_string(cls, entries: str) -> "StaticIdentityProvider":
        # token:user_id:username,token:user_id:username
        provider = cls()
        for entry in entries.split(","):
            entry = entry.strip()
            if not entry:
                continue
            parts = entry.split(":", 2)
            if len(parts) != 3:
                logger.warning(f"Ignoring malformed static token entry: {entry!r}")
                continue
            token, user_id, username = parts
            provider.add_user(user_id, username, token)
        logger.info(f"Static identity provider loaded with {len(provider.tokens)} tokens")
        return provider

    def add_user(self, user_id: str, username: str, token: Optional[str] = None):
        self.users[user_id] = {"id": user_id, "username": username}
        if token:
            self.tokens[token] = user_id

    def remove_user(self, user_id: str):
        self.users.pop(user_id, None)

    def verify_token(self, token: str) -> Optional[str]:
        return self.tokens.get(token)

    def get_user(self, user_id: str) -> Optional[dict]:
        return self.users.get(user_id)

    def ping(self) -> bool:
        return True


def _is_well_formed(token: str) -> bool:
    if len(token) > MAX_TOKEN_LENGTH:
        return False
    return all(ch.isprintable() and not ch.isspace() for ch in token)


class IdentityBinder:
    def __init__(self, provider: IdentityProvider):
        self.provider = provider

    async def bind(self, raw_token: Optional[str]) -> Identity:
        """Resolve a credential token into an Identity or raise AdmissionError.

        The provider is blocking (Redis round-trips), so both calls run in the
        default executor. Nothing here touches room state.
        """
        token = raw_token.strip() if raw_token else ""
        if not token:
            raise AdmissionError("Missing token")
        if not _is_well_formed(token):
            raise AdmissionError("Malformed token")

        loop = asyncio.get_running_loop()
        try:
            user_id = await loop.run_in_executor(None, self.provider.verify_token, token)
        except Exception as e:
            logger.error(f"Identity provider failed to verify token: {e}", exc_info=True)
            raise AdmissionError("Identity service unavailable") from e
        if not user_id:
            raise AdmissionError("Invalid token")

        try:
            profile = await loop.run_in_executor(None, self.provider.get_user, user_id)
        except Exception as e:
            logger.error(f"Identity provider failed to look up user {user_id}: {e}", exc_info=True)
            raise AdmissionError("Identity service unavailable") from e
        if not profile:
            raise AdmissionError("Unknown user")

        username = profile.get("username") or ""
        identity = Identity(id=str(user_id), username=str(username))
        logger.debug(f"Token resolved to user {identity.id} ({identity.username})")
        return identity
