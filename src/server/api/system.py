from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.routing import APIRoute

from src.server.settings.config import settings

router = APIRouter(tags=["system"])

# Only mounted when DEBUG=1
debug_router = APIRouter(tags=["system"])


@router.get("/api/health")
def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
    }


@debug_router.get("/__debug/routes")
def list_routes(request: Request):
    out = []
    for r in request.app.routes:
        if isinstance(r, APIRoute):
            fn = r.endpoint
            out.append({
                "path": r.path,
                "methods": sorted(list(r.methods or [])),
                "name": r.name,
                "endpoint": f"{getattr(fn, '__module__', '?')}.{getattr(fn, '__name__', '?')}",
            })
    return out
