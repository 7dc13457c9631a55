from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import configure_logging
from .routes import router

configure_logging()

app = FastAPI(title="GRC Risk Math")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")
