from pydantic import BaseModel, Field


class SendOTPResponse(BaseModel):
    message: str = "OTP_SENT_SUCCESSFULLY"


class DeleteConfirmRequest(BaseModel):
    blog_id: str
    otp: str = Field(..., min_length=1, max_length=12)


class ErrorResponse(BaseModel):
    detail: str
