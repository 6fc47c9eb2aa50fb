import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import debug, parcels
from api.services import resolution

app = FastAPI(title="Cadastral Parcel Resolver API", version="0.1.0")

default_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8000",
]
cors_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", ",".join(default_origins)).split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, object]:
    return {
        "service": "parcel-resolver",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health() -> dict[str, object]:
    return {
        "status": "ok",
        "upstream": resolution.describe_upstream(),
    }


app.include_router(parcels.router, prefix="/parcels", tags=["parcels"])
app.include_router(debug.router, prefix="/debug", tags=["debug"])
