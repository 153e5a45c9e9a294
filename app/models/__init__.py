from app.models.blog import BlogPost
from app.models.otp import OTPCode

__all__ = [
    "BlogPost",
    "OTPCode",
]
