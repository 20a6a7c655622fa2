"""FastAPI adapter – HttpServer port, pprof router and app factory."""
from mp_pprof.adapters.fastapi.app import FastAPIPProfRouter, create_app
from mp_pprof.adapters.fastapi.server import FastAPIHttpServer

__all__ = [
    "FastAPIHttpServer",
    "FastAPIPProfRouter",
    "create_app",
]
