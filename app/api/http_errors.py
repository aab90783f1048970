from fastapi import HTTPException

from app.core.errors import ConflictError, LeaderboardError, NotFoundError, UpstreamError, ValidationError


def to_http_exception(exc: LeaderboardError, conflict_status: int = 429) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=exc.to_dict())
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=conflict_status, detail=exc.message)
    if isinstance(exc, UpstreamError):
        return HTTPException(status_code=502, detail=exc.message)
    return HTTPException(status_code=500, detail=exc.message)
