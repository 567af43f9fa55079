from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from campusqa.core.config import settings
from campusqa.core.environment import validate_on_startup
from campusqa.core.exceptions import ForumError
from campusqa.api.v1.api import api_router
from campusqa.core.middleware import exception_handler, forum_error_handler
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ENVIRONMENT == "production":
        validate_on_startup()
    yield


app = FastAPI(
    title="Campus Q&A API",
    description="Campus Q&A forum with vote-based approval and a retrieval-augmented chatbot",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Store environment in app state
app.state.ENVIRONMENT = settings.ENVIRONMENT

# Add exception handler middleware
app.middleware("http")(exception_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ForumError, forum_error_handler)


# Add validation error handler for better debugging
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger = logging.getLogger(__name__)
    logger.error(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": jsonable_encoder(exc.errors())}
    )

# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    return {"message": "Campus Q&A API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
