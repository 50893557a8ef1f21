import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
import uvicorn

from .routers.analysis import AnalysisRouter
from .routers.health import HealthRouter
from .routers.market import MarketRouter

API_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class DashboardServer:
    """HTTP facade over the market data fetcher and the analysis engine."""

    def __init__(self,
                 analysis_engine,
                 data_fetcher,
                 sentiment_engine,
                 config,
                 logger,
                 host="127.0.0.1",
                 port=3001):
        self.analysis_engine = analysis_engine
        self.data_fetcher = data_fetcher
        self.sentiment_engine = sentiment_engine
        self.config = config
        self.logger = logger
        self.host = host
        self.port = port
        self.server_task = None
        self._server = None
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        @asynccontextmanager
        async def lifespan(_app: FastAPI):
            self.logger.info(f"Dashboard API live at http://{self.host}:{self.port}")
            yield
            self.logger.info("Dashboard API shutting down...")

        app = FastAPI(title="CryptoSensei", lifespan=lifespan)
        self._install_middleware(app)

        app.state.analysis_engine = self.analysis_engine
        app.state.data_fetcher = self.data_fetcher
        app.state.sentiment_engine = self.sentiment_engine
        app.state.config = self.config
        app.state.logger = self.logger

        routers = (
            MarketRouter(self.logger, self.data_fetcher, self.sentiment_engine),
            AnalysisRouter(self.logger, self.analysis_engine),
            HealthRouter(self.config),
        )
        for router_instance in routers:
            app.include_router(router_instance.router)
        return app

    def _install_middleware(self, app: FastAPI) -> None:
        app.add_middleware(GZipMiddleware, minimum_size=500)

        @app.middleware("http")
        async def add_api_headers(request, call_next):
            response = await call_next(request)
            response.headers.update(API_HEADERS)
            if request.url.path.startswith('/api/'):
                # Upstream responses are cached server side
                response.headers["Cache-Control"] = "no-cache"
            return response

        origins = getattr(self.config, 'DASHBOARD_CORS_ORIGINS', [])
        if origins:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=origins,
                allow_credentials=True,
                allow_methods=["GET"],
                allow_headers=["*"],
            )

    async def start(self):
        """Run uvicorn as a task on the current loop and return that task."""
        debug = getattr(self.config, 'LOGGER_DEBUG', False) is True
        server_config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            log_level="info" if debug else "warning",
            loop="asyncio",
        )
        self._server = uvicorn.Server(server_config)
        # Signals are owned by GracefulShutdownManager
        self._server.install_signal_handlers = lambda: None

        self.server_task = asyncio.create_task(self._serve())
        return self.server_task

    async def _serve(self):
        try:
            await self._server.serve()
        except asyncio.CancelledError:
            self.logger.debug("Dashboard server task cancelled")

    async def stop(self):
        if self._server is not None:
            self._server.should_exit = True
        task = self.server_task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.logger.info("Dashboard server stopped")
