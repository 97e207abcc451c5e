from fastapi import APIRouter
from app.api.v1.endpoints import student

api_router = APIRouter()
api_router.include_router(student.router)
