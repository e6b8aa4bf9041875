"""
FastAPI scaffolding shared by OIDC Access Layer services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from contextlib import asynccontextmanager
from typing import Dict, Optional
import time
import os

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger, set_request_id, clear_context, request_id_var
from shared.metrics import get_metrics_collector
from shared.errors import ErrorResponse, OpenIDError

SERVICE_VERSION = "1.0.0"
REQUEST_ID_HEADER = "X-Request-ID"


class BaseService:
    """FastAPI service with request correlation, health, metrics and OpenID error rendering.

    Subclasses add their routes after ``super().__init__`` and may override
    ``_check_dependencies`` and ``_shutdown``.
    """

    def __init__(self, service_name: str, port: int, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.port = port
        self.config = config or get_config(service_name, port)
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        configure_logging(service_name, self.config.log_level)

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()
        self._setup_exception_handlers()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self.logger.info("Service starting", port=self.port, env=self.config.env)
            yield
            await self._shutdown()
            self.logger.info("Service stopped")

        docs_enabled = self.config.env == "local"
        return FastAPI(
            title=f"{self.service_name.upper()} Service",
            description=f"OIDC Access Layer - {self.service_name.upper()} Service",
            version=SERVICE_VERSION,
            docs_url="/docs" if docs_enabled else None,
            redoc_url="/redoc" if docs_enabled else None,
            lifespan=lifespan,
        )

    def _setup_middleware(self):
        """Set up CORS and request correlation."""

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.env == "local" else [],
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
            expose_headers=["WWW-Authenticate", REQUEST_ID_HEADER],
        )

        @self.app.middleware("http")
        async def add_request_context(request: Request, call_next):
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
            start_time = time.time()
            # Unhandled exceptions surface here and are answered with 500
            status_code = 500

            try:
                response = await call_next(request)
                status_code = response.status_code
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                duration = time.time() - start_time

                # Label by route template to keep metric cardinality bounded
                route = request.scope.get("route")
                endpoint = getattr(route, "path", request.url.path)

                self.metrics.record_http_request(
                    method=request.method,
                    endpoint=endpoint,
                    status_code=status_code,
                    duration=duration
                )
                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=round(duration * 1000, 2)
                )
                clear_context()

    def _setup_routes(self):
        """Set up health and metrics routes."""

        @self.app.get("/health")
        async def health_check():
            """Report service status; 503 when a dependency is unusable."""
            dependencies = await self._check_dependencies()
            healthy = all(state == "ok" for state in dependencies.values())
            status = "ok" if healthy else "degraded"
            self.metrics.record_health_check(status)

            body = {
                "service": self.service_name,
                "status": status,
                "uptime_seconds": self._get_uptime(),
                "dependencies": dependencies,
                "version": SERVICE_VERSION,
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }
            if not healthy:
                self.logger.warning("Health check degraded", dependencies=dependencies)
                return JSONResponse(status_code=503, content=body)
            return body

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(self.metrics.registry),
                media_type=CONTENT_TYPE_LATEST
            )

    def _setup_exception_handlers(self):
        """Render errors in the ErrorResponse envelope."""

        @self.app.exception_handler(OpenIDError)
        async def openid_exception_handler(request: Request, exc: OpenIDError):
            log = self.logger.error if exc.http_status >= 500 else self.logger.warning
            log(
                "OpenID error",
                code=exc.code.value,
                message=exc.message,
                status_code=exc.http_status,
                details=exc.details
            )
            # Bearer challenge for rejected credentials
            headers = {"WWW-Authenticate": "Bearer"} if exc.http_status == 401 else None
            return JSONResponse(
                status_code=exc.http_status,
                content=exc.to_response().model_dump(),
                headers=headers
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            error = ErrorResponse(
                trace_id=request_id_var.get(),
                code="INTERNAL_ERROR",
                message="Internal server error"
            )
            return JSONResponse(status_code=500, content=error.model_dump())

    async def _check_dependencies(self) -> Dict[str, str]:
        """Map dependency name to "ok" or "error". Override in subclasses."""
        return {}

    async def _shutdown(self) -> None:
        """Release service resources. Override in subclasses."""

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service with uvicorn."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
