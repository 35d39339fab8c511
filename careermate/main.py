from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from careermate.config import get_settings
from careermate.database import init_db
from careermate.middleware.correlation import CorrelationMiddleware
from careermate.middleware.rate_limit import limiter
from careermate.routes import (
    auth,
    career_discovery,
    career_guidance,
    career_stories,
    job_suggestions,
    mock_interviews,
)
from careermate.services.gateway import CircuitOpenError, get_gateway
from careermate.services.llm_client import LLMConfigurationError, LLMServiceError
from careermate.services.response_extractor import ParseFailure
from careermate.utils import metrics
from careermate.utils.logger import logger

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS - Explicit origins from config
allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
)
app.add_middleware(CorrelationMiddleware)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting CareerMate Backend...")
    await init_db()
    logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")


# Error responses are always {"error": message}

@app.exception_handler(ParseFailure)
async def parse_failure_handler(request: Request, exc: ParseFailure):
    metrics.inc("errors.parse_failure")
    logger.error(
        f"AI response parse failure: {exc.reason}",
        extra={"path": request.url.path, "preview": exc.preview},
    )
    return JSONResponse(
        status_code=502,
        content={"error": "AI response could not be parsed. Please try again."},
    )


@app.exception_handler(CircuitOpenError)
async def circuit_open_handler(request: Request, exc: CircuitOpenError):
    metrics.inc("errors.circuit_open")
    logger.warning(str(exc), extra={"service": exc.service, "path": request.url.path})
    return JSONResponse(
        status_code=503,
        content={"error": "AI service is temporarily unavailable. Please try again shortly."},
    )


@app.exception_handler(LLMServiceError)
async def llm_service_error_handler(request: Request, exc: LLMServiceError):
    metrics.inc("errors.llm_service")
    logger.error(str(exc), extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(LLMConfigurationError)
async def llm_configuration_error_handler(request: Request, exc: LLMConfigurationError):
    logger.error(f"AI provider is not configured: {exc}")
    return JSONResponse(status_code=500, content={"error": "AI service is not configured"})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    metrics.inc("errors.unhandled")
    logger.error(
        f"Unhandled error: {exc}",
        exc_info=exc,
        extra={"path": request.url.path},
    )
    content = {"error": "Something went wrong!"}
    if settings.debug:
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"status": "ok", "service": settings.app_name}


@app.get("/metrics")
async def get_metrics():
    """In-process counters and timings plus circuit breaker states"""
    return {
        **metrics.get_snapshot(),
        "circuits": get_gateway().get_circuit_states(),
    }


@app.get("/routes")
async def list_routes():
    """Every documented endpoint, including those on included routers"""
    return {
        "routes": sorted(
            f"{method.upper()} {path}"
            for path, operations in app.openapi()["paths"].items()
            for method in operations
        )
    }


# Register routes
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(career_guidance.router, prefix="/api", tags=["Career Guidance"])
app.include_router(mock_interviews.router, prefix="/api", tags=["Mock Interviews"])
app.include_router(job_suggestions.router, prefix="/api", tags=["Job Suggestions"])
app.include_router(career_discovery.router, prefix="/api", tags=["Career Discovery"])
app.include_router(career_stories.router, prefix="/api", tags=["Career Storyteller"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "careermate.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )
