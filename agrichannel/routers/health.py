import time
from pathlib import Path

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/ping")
def ping():
    return {"ok": True, "ts": int(time.time() * 1000)}


@router.get("/debug/dbstatus")
def db_status(request: Request):
    storage_path = request.app.state.engine.url.database
    size = None
    exists = False
    if storage_path and storage_path != ":memory:":
        path = Path(storage_path)
        exists = path.exists()
        if exists:
            size = path.stat().st_size
    return {
        "storagePath": storage_path,
        "exists": exists,
        "sizeBytes": size,
        "appEnv": request.app.state.settings.app_env,
    }
