"""
InfraSim Simulation Service - FastAPI Application

Main entry point for the infrastructure degradation simulation API.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from core.config import CORS_ORIGINS
from core.constants import DEFAULT_HOST, DEFAULT_PORT
from core.errors import InfraSimError, handle_exception
from api.routers import system, simulations


# Initialize App
app = FastAPI(
    title="InfraSim Simulation Service",
    description="Month-by-month infrastructure degradation and risk projection",
    version="1.0.0",
)


async def infrasim_error_handler(request: Request, exc: InfraSimError) -> JSONResponse:
    http_exc = handle_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


app.add_exception_handler(InfraSimError, infrasim_error_handler)

origins = [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=[
        "content-type",
        "accept",
        "accept-language",
        "origin",
    ],
    expose_headers=["content-type", "content-length"],
    max_age=3600,
)

# Include Routers
app.include_router(system.router, tags=["System"])
app.include_router(simulations.router, tags=["Simulations"])


if __name__ == "__main__":
    uvicorn.run(app, host=DEFAULT_HOST, port=DEFAULT_PORT)
