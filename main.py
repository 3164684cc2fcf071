"""
DocAI Document Chat - Main application entry point
"""
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware

# Import configuration and dependencies
from config import settings
from api.dependencies import AppServices, build_services

# Import API routers
from api.chat_controller import router as chat_router
from api.session_controller import router as session_router

# Import error handling and utilities
from utils.error_handlers import ErrorHandlingMiddleware, get_status_code_for_error_code
from utils.logging import setup_logging, log_api_request
from utils.exceptions import DocAIException, ErrorCode
from utils.health_check import HealthChecker, HealthStatus, is_service_ready

# Configure logging
logger = setup_logging()


def _now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown events
    """
    start_time = time.time()
    app.state.start_time = start_time

    logger.info(f"Starting {settings.app_name} v{settings.app_version}...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    try:
        if getattr(app.state, "services", None) is None:
            logger.info("Initializing core services...")
            app.state.services = build_services(settings)

        services: AppServices = app.state.services
        app.state.health_checker = HealthChecker(
            object_store=services.object_store,
            gemini_client=services.gemini_client,
            session_store=services.session_store
        )

        system_health = await app.state.health_checker.check_system_health()
        logger.info(f"Initial system health check: {system_health.status.value}")

        startup_time = time.time() - start_time
        logger.info(f"{settings.app_name} startup completed successfully in {startup_time:.2f} seconds")

    except Exception as e:
        logger.error(f"Failed to start {settings.app_name}: {e}")
        raise

    yield

    # Sessions are in memory only and end with the process
    logger.info(f"Shutting down {settings.app_name}...")
    app.state.services = None
    logger.info(f"{settings.app_name} shutdown completed")


def configure_middleware(app: FastAPI):
    """Configure all application middleware"""

    # Security middleware - Trusted Host
    if settings.allowed_hosts:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.allowed_hosts.split(",")
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins.split(","),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
        max_age=3600,
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id

        client_ip = request.client.host if request.client else "unknown"
        user_agent = request.headers.get("user-agent", "unknown")

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(f"Request failed: {request.method} {request.url.path} - {str(e)}")
            log_api_request(
                method=request.method,
                path=str(request.url.path),
                status_code=500,
                duration_ms=duration_ms,
                request_id=request_id,
                user_agent=user_agent,
                client_ip=client_ip
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        log_api_request(
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            duration_ms=duration_ms,
            request_id=request_id,
            user_agent=user_agent,
            client_ip=client_ip
        )

        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(ErrorHandlingMiddleware)


def configure_exception_handlers(app: FastAPI):
    """Register handlers producing the structured error envelope"""

    @app.exception_handler(DocAIException)
    async def docai_exception_handler(request: Request, exc: DocAIException):
        logger.warning(f"DocAI exception in {request.method} {request.url}: {exc}")
        return JSONResponse(
            status_code=get_status_code_for_error_code(exc.error_code),
            content=exc.to_dict()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error in {request.method} {request.url}: {exc}")

        field_errors = [
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            }
            for error in exc.errors()
        ]

        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": "Request validation failed",
                    "details": {"field_errors": field_errors},
                    "timestamp": _now()
                }
            }
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict):
            return JSONResponse(status_code=exc.status_code, content=exc.detail)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": "HTTP_ERROR",
                    "message": str(exc.detail),
                    "timestamp": _now()
                }
            }
        )


def configure_routes(app: FastAPI):
    """Register API routers and the health and info endpoints"""
    app.include_router(chat_router)
    app.include_router(session_router)

    @app.get("/health")
    async def health_check():
        """
        Basic health check endpoint for load balancers and monitoring
        """
        return {
            "status": "healthy",
            "message": f"{settings.app_name} is running",
            "version": settings.app_version,
            "timestamp": _now()
        }

    @app.get("/health/detailed")
    async def detailed_health_check(request: Request):
        """
        Detailed health check endpoint with component status
        """
        health_checker: Optional[HealthChecker] = getattr(request.app.state, "health_checker", None)
        if health_checker is None:
            services: Optional[AppServices] = getattr(request.app.state, "services", None)
            health_checker = HealthChecker(
                object_store=services.object_store if services else None,
                gemini_client=services.gemini_client if services else None,
                session_store=services.session_store if services else None
            )

        system_health = await health_checker.check_system_health(include_details=True)

        # Degraded is still operational
        status_code = 503 if system_health.status == HealthStatus.UNHEALTHY else 200
        return JSONResponse(status_code=status_code, content=system_health.to_dict())

    @app.get("/health/ready")
    async def readiness_check(request: Request):
        """
        Readiness check endpoint for container orchestration
        """
        services: Optional[AppServices] = getattr(request.app.state, "services", None)

        if services is None:
            message = "Required services not initialized"
        elif not is_service_ready(services.object_store, services.gemini_client):
            message = "Object store or generative AI service not configured"
        else:
            return {
                "status": "ready",
                "message": "Service is ready to accept requests",
                "timestamp": _now()
            }

        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "message": message, "timestamp": _now()}
        )

    @app.get("/health/live")
    async def liveness_check(request: Request):
        """
        Liveness check endpoint for container orchestration
        """
        start_time = getattr(request.app.state, "start_time", time.time())
        return {
            "status": "alive",
            "message": "Service is alive",
            "timestamp": _now(),
            "uptime_seconds": int(time.time() - start_time)
        }

    @app.get("/")
    async def root():
        """
        Root endpoint with API information
        """
        return {
            "message": f"Welcome to the {settings.app_name} API",
            "version": settings.app_version,
            "environment": settings.environment,
            "documentation": "/docs",
            "endpoints": {
                "chat": "POST /api/chat",
                "create_session": "POST /api/sessions",
                "list_sessions": "GET /api/sessions",
                "get_session": "GET /api/sessions/{session_id}",
                "ask_in_session": "POST /api/sessions/{session_id}/messages",
                "health_check": "GET /health",
                "detailed_health": "GET /health/detailed",
                "readiness": "GET /health/ready",
                "liveness": "GET /health/live"
            },
            "timestamp": _now()
        }

    @app.get("/info")
    async def application_info():
        """
        Application information endpoint
        """
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "debug": settings.debug,
            "configuration": {
                "max_file_size_mb": settings.max_file_size_mb,
                "s3_bucket": settings.s3_bucket,
                "s3_region": settings.s3_region,
                "gemini_model": settings.gemini_model,
                "cleanup_orphaned_documents": settings.cleanup_orphaned_documents,
                "log_level": settings.log_level
            },
            "timestamp": _now()
        }


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """
    Application factory function

    Args:
        services: Pre-built services; built from settings at startup when omitted
    """
    app = FastAPI(
        title=settings.app_name,
        description="Upload a PDF, let a generative model extract its content, then chat about it",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.services = services

    configure_middleware(app)
    configure_exception_handlers(app)
    configure_routes(app)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers if not settings.debug else 1,
        reload=settings.debug,
        log_config=None,
        access_log=False,
        server_header=False,
        date_header=False
    )
