# tablepos/main.py
import logging
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tablepos.config import Settings, settings
from tablepos.deps import get_runtime
from tablepos.errors import install_handlers
from tablepos.middleware import RequestIdMiddleware
from tablepos.routers import dining, menu, orders, reports
from tablepos.routers import settings as settings_router
from tablepos.services.runtime import PosRuntime
from tablepos.store import build_store

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(level.upper())


def build_runtime(cfg: Settings) -> PosRuntime:
    store = build_store(cfg)
    if not store.probe(cfg.STORE_PROBE_TIMEOUT_SEC):
        logger.error("data store did not answer within %.1fs", cfg.STORE_PROBE_TIMEOUT_SEC)
    return PosRuntime(
        store,
        misc_rate_per_minute=cfg.MISC_RATE_PER_MINUTE,
        tz=ZoneInfo(cfg.REPORT_TZ),
    ).connect()


def create_app(runtime: PosRuntime | None = None, cfg: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = runtime is None
        app.state.runtime = build_runtime(cfg) if owned else runtime.connect()
        app.state.probe_timeout = cfg.STORE_PROBE_TIMEOUT_SEC
        yield
        app.state.runtime.close()
        if owned:
            app.state.runtime.store.close()

    app = FastAPI(title="TablePOS API", version="0.1.0", lifespan=lifespan)
    install_handlers(app)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(menu.router)
    app.include_router(dining.router)
    app.include_router(orders.router)
    app.include_router(reports.router)
    app.include_router(settings_router.router)

    @app.get("/healthz")
    def healthz(rt: PosRuntime = Depends(get_runtime)):
        return {"ok": rt.store.probe(app.state.probe_timeout)}

    return app


configure_logging(settings.LOG_LEVEL)
app = create_app()
