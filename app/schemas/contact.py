from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    identifier: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    message: str = Field(..., min_length=1, max_length=10000)
    timestamp: str | None = None
    user_agent: str | None = Field(None, alias="userAgent")

    model_config = {"populate_by_name": True}


class ContactResponse(BaseModel):
    message: str = "Handshake transmission successful. Data received."
