"""
API key check for tracking requests.

The key and the header that carries it both come from Settings, so a
deployment behind a gateway can forward the key under its own header name.
Health endpoints stay open.
"""

import hmac
import logging

from fastapi import HTTPException, Request, status

from speakertrack.config import get_settings

logger = logging.getLogger(__name__)


async def verify_api_key(request: Request) -> None:
    """
    FastAPI dependency guarding the tracking routes.

    Raises:
        HTTPException: 401 when the key header is absent, 403 when it does
            not match SPEAKERTRACK_API_KEY
    """
    settings = get_settings()
    if not settings.speakertrack_api_key:
        return

    header = settings.api_key_header
    supplied = request.headers.get(header)

    if not supplied:
        logger.warning(f"Rejected {request.url.path}: no {header} header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Speaker tracking requires an API key in the {header} header",
            headers={"WWW-Authenticate": header},
        )

    if not hmac.compare_digest(supplied.encode(), settings.speakertrack_api_key.encode()):
        logger.warning(f"Rejected {request.url.path}: API key mismatch")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key is not valid for this tracking service",
        )
