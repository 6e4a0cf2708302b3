from datetime import timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.app.services.exchange_token_store import IExchangeTokenStore
from src.app.services.notifier import INotifier
from src.app.services.rate_limiter import RateLimitPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.otp import (
    IssueOtpResponse,
    IssueOtpUseCase,
    ValidateOtpResponse,
    ValidateOtpUseCase,
)
from src.depends import (
    get_exchange_token_store,
    get_notifier,
    get_rate_limit_policy,
    get_unit_of_work,
)
from src.domain.entities import DeliveryChannel

router = APIRouter(prefix="/otp", tags=["OTP"])


class IssueOtpRequest(BaseModel):
    """Issue OTP HTTP request payload"""

    guardian_id: UUID = Field(..., description="Guardian ID returned by linkage verification")
    student_id: UUID = Field(..., description="Student ID returned by linkage verification")
    channel: DeliveryChannel = Field(..., description="Delivery channel (email or sms)")


@router.post("/issue", status_code=status.HTTP_200_OK, response_model=IssueOtpResponse)
async def issue_otp(
    request: IssueOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: INotifier = Depends(get_notifier),
):
    """
    Issue One-Time Code

    Replaces any pending code for the pair and dispatches a new one.

    Raises:
        - 400 Bad Request: Guardian has no contact for the channel
        - 404 Not Found: Guardian or student not found
        - 409 Conflict: Concurrent issue for the same pair
        - 500 Internal Server Error: Server error
    """
    use_case = IssueOtpUseCase(
        uow,
        notifier,
        ttl=timedelta(minutes=ApplicationConfig.OTP_TTL_MINUTES),
        debug_echo=ApplicationConfig.OTP_DEBUG_ECHO,
    )
    result = await use_case.execute(request.guardian_id, request.student_id, request.channel)

    if result.is_err():
        error = result.error
        if error.code == "MISSING_CONTACT":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code in ("GUARDIAN_NOT_FOUND", "STUDENT_NOT_FOUND"):
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "CHALLENGE_CONFLICT":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


class ValidateOtpRequest(BaseModel):
    """Validate OTP HTTP request payload"""

    guardian_id: UUID = Field(..., description="Guardian ID")
    student_id: UUID = Field(..., description="Student ID")
    code: str = Field(..., pattern=r"^\d{6}$", description="6-digit code")


@router.post("/validate", status_code=status.HTTP_200_OK, response_model=ValidateOtpResponse)
async def validate_otp(
    request: ValidateOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_store: IExchangeTokenStore = Depends(get_exchange_token_store),
    rate_limit_policy: RateLimitPolicy = Depends(get_rate_limit_policy),
):
    """
    Validate One-Time Code

    Consumes the code and returns a short-lived exchange token for the reset.

    Raises:
        - 400 Bad Request: Wrong or already used code
        - 410 Gone: Code expired
        - 429 Too Many Requests: Too many wrong codes for this pair
        - 500 Internal Server Error: Server error
    """
    use_case = ValidateOtpUseCase(
        uow,
        token_store,
        token_ttl=timedelta(minutes=ApplicationConfig.EXCHANGE_TOKEN_TTL_MINUTES),
        rate_limit_policy=rate_limit_policy,
    )
    result = await use_case.execute(request.guardian_id, request.student_id, request.code)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_OR_USED_CODE":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "EXPIRED_CODE":
            raise ClientError(error, status_code=status.HTTP_410_GONE)
        elif error.code == "TOO_MANY_ATTEMPTS":
            raise ClientError(error, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
        raise ServerError(error)

    return result.value
