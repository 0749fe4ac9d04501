"""
Caller identity for HTTP requests

Authentication itself happens upstream (API gateway). By the time a request
reaches this service the gateway has put the user id in X-User-Id.
"""

from typing import Optional

from fastapi import Header

from src.platform.exception.exceptions import AuthenticationError, DomainError


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if x_user_id is None or not x_user_id.strip():
        raise AuthenticationError('Missing X-User-Id header')
    return x_user_id.strip()


async def get_idempotency_key(
    idempotency_key: Optional[str] = Header(default=None),
) -> Optional[str]:
    if idempotency_key is None:
        return None
    key = idempotency_key.strip()
    if not key:
        raise DomainError('Idempotency-Key header cannot be blank')
    if len(key) > 128:
        raise DomainError('Idempotency-Key header is longer than 128 characters')
    return key
