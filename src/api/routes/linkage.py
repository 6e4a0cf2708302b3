from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field, model_validator

from src.api.error import ClientError, ServerError
from src.api.utils.request_meta import extract_client_ip
from src.app.services.rate_limiter import RateLimitPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.linkage import (
    VerifyLinkageCommand,
    VerifyLinkageResponse,
    VerifyLinkageUseCase,
)
from src.depends import get_rate_limit_policy, get_unit_of_work

router = APIRouter(prefix="/linkage", tags=["Linkage"])

NOT_FOUND_CODES = ("GUARDIAN_NOT_FOUND", "STUDENT_NOT_FOUND", "LINKAGE_NOT_FOUND")


class VerifyLinkageRequest(BaseModel):
    """
    Verify linkage HTTP request payload

    The student is identified by enrollment code or directory email.
    """

    national_id: str = Field(
        ..., min_length=1, max_length=20, description="Guardian national identifier (CPF)"
    )
    enrollment_code: Optional[str] = Field(
        None, min_length=1, max_length=50, description="Student enrollment code"
    )
    email: Optional[EmailStr] = Field(None, description="Student directory email")

    @model_validator(mode="after")
    def require_student_key(self):
        if not self.enrollment_code and not self.email:
            raise ValueError("Provide enrollment_code or email")
        return self


@router.post("/verify", status_code=status.HTTP_200_OK, response_model=VerifyLinkageResponse)
async def verify_linkage(
    payload: VerifyLinkageRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    rate_limit_policy: RateLimitPolicy = Depends(get_rate_limit_policy),
):
    """
    Verify Guardian/Student Linkage

    Confirms the guardian identified by national_id is linked to the student.
    Failed lookups count against the identifier and the caller IP.

    Raises:
        - 400 Bad Request: Invalid identifier or missing student key
        - 404 Not Found: Guardian, student or linkage not found
        - 429 Too Many Requests: Identifier or IP locked
        - 500 Internal Server Error: Server error
    """
    command = VerifyLinkageCommand(
        national_id=payload.national_id,
        enrollment_code=payload.enrollment_code,
        email=str(payload.email) if payload.email else None,
        ip_address=extract_client_ip(request),
    )

    use_case = VerifyLinkageUseCase(uow, rate_limit_policy)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_IDENTIFIER", "INVALID_INPUT"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code in NOT_FOUND_CODES:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "TOO_MANY_ATTEMPTS":
            raise ClientError(error, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
        raise ServerError(error)

    return result.value
