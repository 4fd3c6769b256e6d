# src/api.py
from fastapi import APIRouter

from src.upload.router import router as upload_router

api_router = APIRouter()
api_router.include_router(upload_router, prefix="/upload", tags=["upload"])
