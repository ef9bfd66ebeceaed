from __future__ import annotations
import logging

from fastapi import FastAPI

from canvaschat import __version__
from canvaschat.config import load_settings
from canvaschat.api.routes import router

logging.basicConfig(
    level=logging.DEBUG if load_settings().debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Canvas Chat API", version=__version__)
app.include_router(router)
