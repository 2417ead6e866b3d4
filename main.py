# -*- coding: utf-8 -*-
"""
Main FastAPI application for the Into The Wild trek registration system.
"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

import create_first_user
from intothewild import config
from intothewild.database import engine, Base
from intothewild.errors import WorkflowError
from intothewild.storage import StorageError
from intothewild.models import user, trek, registration, id_proof, tent, notification
from intothewild.routes import (
    auth_fastapi, users_fastapi, treks_fastapi, registrations_fastapi,
    id_proofs_fastapi, tents_fastapi, notifications_fastapi
)

logging_options = {}
if config.LOG_FILE:
    logging_options["filename"] = config.LOG_FILE
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    **logging_options
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

docs_enabled = config.ENVIRONMENT != "production"

app = FastAPI(
    title="Into The Wild API",
    description="Trek registrations, payment proofs, ID verification and tent rentals",
    version="1.0.0",
    docs_url="/docs" if docs_enabled else None,
    redoc_url="/redoc" if docs_enabled else None,
    openapi_url="/openapi.json" if docs_enabled else None
)

origins = [
    config.FRONTEND_URL,
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
]

app.add_middleware(SessionMiddleware, secret_key=config.SESSION_SECRET)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    # The code is for the logs; users only see the message
    logger.warning(f"{request.method} {request.url.path} failed with {exc.code.value}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage unavailable for {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": "File storage is unavailable. Please try again later."})

app.include_router(auth_fastapi.router)
app.include_router(users_fastapi.router)
app.include_router(treks_fastapi.router, prefix="/api/v1/treks")
app.include_router(registrations_fastapi.router, prefix="/api/v1/registrations")
app.include_router(id_proofs_fastapi.router, prefix="/api/v1/id-proofs")
app.include_router(tents_fastapi.router, prefix="/api/v1/tents")
app.include_router(notifications_fastapi.router, prefix="/api/v1/notifications")

if config.CREATE_FIRST_ADMIN:
    create_first_user.create_first_user()

@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Into The Wild API",
        "docs": "/docs" if docs_enabled else None,
        "endpoints": [
            {"auth": "/api/v1/auth"},
            {"treks": "/api/v1/treks"},
            {"registrations": "/api/v1/registrations"},
            {"id_proofs": "/api/v1/id-proofs"},
            {"tents": "/api/v1/tents"},
            {"notifications": "/api/v1/notifications"}
        ]
    }
