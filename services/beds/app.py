# ============================================================
# app.py — Entry point of the Bed Occupancy Service
# ------------------------------------------------------------
# Builds the FastAPI application:
#   - configures logging and CORS
#   - creates the tables and the default admin at startup
#   - mounts the auth router and the hotels/customers API
# Run with: uvicorn app:app --app-dir services/beds
# ============================================================
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import db
from api import router
from auth import ensure_admin
from auth import router as auth_router
from config import Config

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)

app = FastAPI(title="Bed Occupancy Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# Runs once when the server starts.
# 1. Creates the SQL tables if missing.
# 2. Seeds the admin account on an empty users table.
@app.on_event("startup")
def start():
    db.init_db()
    with db.new_session() as s:
        ensure_admin(s)


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(auth_router)
app.include_router(router)
