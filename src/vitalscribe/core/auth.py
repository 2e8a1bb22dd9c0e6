"""
Authentication service.

Resolves the owner (clinician) id for a request from an API key. Keys are
configured as ``API_KEYS="key1:owner1,key2:owner2"``.
"""

import logging
import os
from typing import Dict, Optional

from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service for validating API keys"""

    def __init__(self, api_keys: Optional[str] = None):
        """Initialize with an explicit key string or the API_KEYS environment variable"""
        self.api_keys: Dict[str, str] = {}
        raw = api_keys if api_keys is not None else os.getenv("API_KEYS", "")
        if raw:
            self._parse_api_keys(raw)
            logger.info(f"Loaded {len(self.api_keys)} API key(s)")
        else:
            logger.warning("No API keys configured. Authentication will fail for all requests.")

    def _parse_api_keys(self, api_keys_str: str) -> None:
        """
        Parse API keys string.
        Format: "key1:user1,key2:user2" (comma-separated key:user pairs)
        """
        for pair in api_keys_str.split(","):
            pair = pair.strip()
            if not pair:
                continue

            if ":" in pair:
                key, owner_id = (part.strip() for part in pair.split(":", 1))
                if key and owner_id:
                    self.api_keys[key] = owner_id
            else:
                # If no colon, use the key itself as owner identifier
                self.api_keys[pair] = pair

    def validate_api_key(self, api_key: Optional[str]) -> str:
        """
        Validate API key and return the owner id.

        Raises:
            AuthenticationError: If API key is invalid or missing
        """
        if not api_key:
            raise AuthenticationError(
                "Authentication required. Provide X-API-Key header or Authorization Bearer token."
            )

        if api_key.startswith("Bearer "):
            api_key = api_key[7:].strip()

        owner_id = self.api_keys.get(api_key)
        if owner_id:
            logger.debug(f"API key validated for owner: {owner_id}")
            return owner_id

        logger.warning(f"Invalid API key attempted: {api_key[:4]}...")
        raise AuthenticationError("Invalid API key or token")

    def get_owner_from_headers(
        self, api_key: Optional[str] = None, auth_header: Optional[str] = None
    ) -> str:
        """
        Extract and validate the owner id.

        Priority:
        1. X-API-Key header
        2. Authorization Bearer token
        """
        if api_key:
            return self.validate_api_key(api_key)
        if auth_header and auth_header.startswith("Bearer "):
            return self.validate_api_key(auth_header)
        return self.validate_api_key(None)


_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get the process-wide authentication service."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
