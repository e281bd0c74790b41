from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from broker_portal.core.context import set_broker_id
from broker_portal.core.security import BROKER_ROLE, decode_token
from broker_portal.db.session import get_db
from broker_portal.models import Broker

# Tokens are minted elsewhere; this service only verifies them.
bearer_scheme = HTTPBearer(scheme_name="BROKER", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_broker(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Broker:
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_token(credentials.credentials, expected_type="access")
    except ValueError as exc:
        raise _unauthorized(str(exc)) from exc

    if payload.get("role") != BROKER_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Broker access required")

    try:
        broker_id = UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise _unauthorized("Invalid token") from exc

    result = await db.execute(select(Broker).where(Broker.id == broker_id))
    broker = result.scalar_one_or_none()
    if not broker:
        raise _unauthorized("Broker not found")
    if not broker.is_active:
        raise _unauthorized("Inactive broker")
    token_version = payload.get("tv")
    if token_version is not None and broker.token_version != token_version:
        raise _unauthorized("Token revoked")
    return broker


async def require_broker(current_broker: Broker = Depends(get_current_broker)) -> Broker:
    """Guard for broker-only endpoints; tags the logging context with the broker id."""
    set_broker_id(str(current_broker.id))
    return current_broker
