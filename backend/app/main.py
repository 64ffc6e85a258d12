# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Your configuration and DB
from app.config import settings
from app.core.db import init_db, close_db
from app.core.errors import register_error_handlers

from app.api.v1.routers import users, events, availabilities

from app.core.bootstrap import start_expired_user_purge, stop_expired_user_purge
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Domain errors -> JSON responses with their status codes
register_error_handlers(app)

@app.on_event("startup")
async def on_startup():
    await init_db()
    # Unconfirmed accounts past their expiry are removed periodically
    app.state.purge_task = start_expired_user_purge()
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)

@app.on_event("shutdown")
async def on_shutdown():
    await stop_expired_user_purge(getattr(app.state, "purge_task", None))
    await close_db()

# REST
app.include_router(users.router, prefix="/api/v1")
app.include_router(events.router, prefix="/api/v1")
app.include_router(availabilities.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
