from fastapi import APIRouter

from app.routers import blogs, contact, otp

api_router = APIRouter()

api_router.include_router(otp.router)
api_router.include_router(blogs.router)
api_router.include_router(contact.router)
