# itscooked/app/main.py
from __future__ import annotations
import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itscooked.app.config import settings
from itscooked.app.routers.auth import router as auth_router
from itscooked.app.routers.recipes import router as recipes_router

# Plain stdout logging, fine for dev and containers
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

app = FastAPI(title="itscooked API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipes_router)
app.include_router(auth_router)


@app.get("/health")
def health():
    return {"ok": True, "env": settings.APP_ENV}
