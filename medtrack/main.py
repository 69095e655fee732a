from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medtrack.core.config import settings
from medtrack.core.db import init_db
from medtrack.core.errors import register_exception_handlers
from medtrack.core.logging import setup_logging
from medtrack.core.middleware import StructlogMiddleware
from medtrack.modules.appointments import router as appointments_router
from medtrack.modules.auth import router as auth_router
from medtrack.modules.caregivers import router as caregivers_router
from medtrack.modules.intake_events import router as intake_events_router
from medtrack.modules.medications import router as medications_router
from medtrack.modules.notifications import router as notifications_router
from medtrack.modules.patients import router as patients_router
from medtrack.modules.permissions import router as permissions_router
from medtrack.modules.subscriptions import router as subscriptions_router
from medtrack.modules.treatments import router as treatments_router

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    mongo_client = await init_db()
    app.state.mongo_client = mongo_client

    yield

    # Shutdown
    await mongo_client.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    ## MedTrack API

    This API provides:
    * **Accounts**: Patient and caregiver registration, login and profiles
    * **Care circle**: Invite codes and per-caregiver access levels
    * **Health records**: Medications, treatments, appointments and intake events
    * **Notifications**: In-app notifications and web-push subscriptions

    ### Authentication
    Most endpoints require authentication using Bearer tokens.
    1. Register via `/api/v1/auth/register`
    2. Login via `/api/v1/auth/login` to get your token
    3. Use the "Authorize" button above to set your token
    """,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(StructlogMiddleware)
register_exception_handlers(app)

app.include_router(
    auth_router.router, prefix=f"{settings.API_V1_STR}/auth", tags=["auth"]
)
app.include_router(
    patients_router.router, prefix=f"{settings.API_V1_STR}/patients", tags=["patients"]
)
app.include_router(
    caregivers_router.router,
    prefix=f"{settings.API_V1_STR}/caregivers",
    tags=["caregivers"],
)
app.include_router(
    permissions_router.router,
    prefix=f"{settings.API_V1_STR}/permissions",
    tags=["permissions"],
)
app.include_router(
    medications_router.router,
    prefix=f"{settings.API_V1_STR}/medications",
    tags=["medications"],
)
app.include_router(
    treatments_router.router,
    prefix=f"{settings.API_V1_STR}/treatments",
    tags=["treatments"],
)
app.include_router(
    appointments_router.router,
    prefix=f"{settings.API_V1_STR}/appointments",
    tags=["appointments"],
)
app.include_router(
    intake_events_router.router,
    prefix=f"{settings.API_V1_STR}/intake-events",
    tags=["intake-events"],
)
app.include_router(
    notifications_router.router,
    prefix=f"{settings.API_V1_STR}/notifications",
    tags=["notifications"],
)
app.include_router(
    subscriptions_router.router, prefix=f"{settings.API_V1_STR}/push", tags=["push"]
)


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}
