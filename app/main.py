import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1 import index
from app.api.v1 import auth
from app.api.v1 import accounts
from app.api.v1 import drivers
from app.api.v1 import missions
from app.api.v1 import mission_requests
from app.api.v1 import reports
from app.api.v1 import tracking
from app.api.v1.references import clients
from app.api.v1.references import collection_sites
from app.api.v1.references import deposit_sites
from app.api.v1.references import vehicles
from app.api.v1.references import material_types


from app.core.config import settings
from app.core.logging import setup_logging

setup_logging()

app = FastAPI(title=settings.app_name)

# Middlewares
origins = []

if settings.allowed_hosts:
    origins = settings.allowed_hosts.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.opt(exception=exc).error(
        f"Database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A database error occurred. Please try again."},
    )


# Register routes
app.include_router(index.router, prefix="/api/v1")
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(accounts.router, prefix="/api/v1/accounts")
app.include_router(drivers.router, prefix="/api/v1/drivers", tags=["Drivers"])
app.include_router(clients.router, prefix="/api/v1/clients", tags=["Clients"])
app.include_router(collection_sites.router,
                   prefix="/api/v1/collection-sites", tags=["Collection Sites"])
app.include_router(deposit_sites.router,
                   prefix="/api/v1/deposit-sites", tags=["Deposit Sites"])
app.include_router(vehicles.router, prefix="/api/v1/vehicles", tags=["Vehicles"])
app.include_router(material_types.router,
                   prefix="/api/v1/material-types", tags=["Material Types"])
app.include_router(missions.router, prefix="/api/v1/missions", tags=["Missions"])
app.include_router(mission_requests.router,
                   prefix="/api/v1/mission-requests", tags=["Mission Requests"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])
app.include_router(tracking.router, prefix="/api/v1/tracking", tags=["Tracking"])

# Static files serving (tracking QR codes)
app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=None,
    )
