from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError, UpstreamError
from src.api.utils.request_meta import extract_client_ip, extract_user_agent
from src.app.services.directory_service import IDirectoryService
from src.app.services.exchange_token_store import IExchangeTokenStore
from src.app.services.rate_limiter import RateLimitPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.reset import (
    ExecutePasswordResetUseCase,
    ExecuteResetCommand,
    ExecuteResetResponse,
)
from src.depends import (
    get_directory_service,
    get_exchange_token_store,
    get_rate_limit_policy,
    get_unit_of_work,
)

router = APIRouter(tags=["Password Reset"])


class ExecuteResetRequest(BaseModel):
    """Password reset HTTP request payload"""

    token: str = Field(..., min_length=32, max_length=256, description="Exchange token")


@router.post("/password-reset", status_code=status.HTTP_200_OK, response_model=ExecuteResetResponse)
async def execute_password_reset(
    payload: ExecuteResetRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_store: IExchangeTokenStore = Depends(get_exchange_token_store),
    directory: IDirectoryService = Depends(get_directory_service),
    rate_limit_policy: RateLimitPolicy = Depends(get_rate_limit_policy),
):
    """
    Execute Password Reset

    Redeems the exchange token and sets a temporary directory password.
    The password is shown in this response only.

    Raises:
        - 401 Unauthorized: Token invalid, expired or already used
        - 404 Not Found: Student or guardian no longer exists
        - 502 Bad Gateway: Directory service rejected the reset
        - 500 Internal Server Error: Server error
    """
    command = ExecuteResetCommand(
        token=payload.token,
        ip_address=extract_client_ip(request),
        user_agent=extract_user_agent(request),
    )

    use_case = ExecutePasswordResetUseCase(uow, token_store, directory, rate_limit_policy)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_OR_EXPIRED_TOKEN":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code in ("STUDENT_NOT_FOUND", "GUARDIAN_NOT_FOUND"):
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "DIRECTORY_RESET_FAILED":
            raise UpstreamError(error)
        raise ServerError(error)

    return result.value
