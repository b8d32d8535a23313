from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.server.api import ai, auth, customers, products, quotes, system
from src.server.api import settings as settings_api
from src.server.db.session import init_db
from src.server.settings.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.check_secrets()
    print(f"Initializing database ({settings.environment})...")
    init_db()
    yield
    print("Shutting down...")


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

# CORS for the browser front end
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(system.router)          # /api/health
app.include_router(auth.router)            # /api/auth/...
app.include_router(customers.router)       # /api/customers/...
app.include_router(products.router)        # /api/products/...
app.include_router(quotes.router)          # /api/quotes/...
app.include_router(settings_api.router)    # /api/settings/...
app.include_router(ai.router)              # /api/ai/..., works without a token

if settings.debug:
    app.include_router(system.debug_router)
