from fastapi import Request, status
from fastapi.responses import JSONResponse
import logging

from campusqa.core.exceptions import ForumError

logger = logging.getLogger(__name__)


async def exception_handler(request: Request, call_next):
    """Global exception handler"""
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(e) if request.app.state.ENVIRONMENT == "development" else "An error occurred"
            }
        )


async def forum_error_handler(request: Request, exc: ForumError):
    """Render forum errors with their machine-readable code"""
    if exc.status_code >= 500:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail}
    )
