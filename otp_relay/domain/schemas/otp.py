from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr


# Inbound bodies. Fields are optional here so that a missing value becomes
# a 400 with a readable message instead of FastAPI's 422.
class OtpEmailIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    otp: Optional[Union[StrictStr, StrictInt]] = None   # forwarded to the template as-is, never coerced


class IdentityOtpIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None


class OtpSentOut(BaseModel):
    success: bool = True


class IdentityOtpOut(BaseModel):
    message: str = "OTP sent successfully"
    data: Any = None


class ErrorOut(BaseModel):
    error: str
