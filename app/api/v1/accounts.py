from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger

from app.core.dependencies import get_account_service, require_service_key
from app.models.profile import AdminBootstrapRead
from app.services.account import AccountService


router = APIRouter()


@router.post(
    "/bootstrap-admin",
    response_model=AdminBootstrapRead,
    status_code=status.HTTP_200_OK,
    summary="Create the initial administrator",
    tags=["Accounts"],
    dependencies=[Depends(require_service_key)]
)
def bootstrap_admin(
    service: AccountService = Depends(get_account_service)
):
    """
    Recreates the administrator configured by INITIAL_ADMIN_EMAIL /
    INITIAL_ADMIN_PASSWORD. Requires the service key as bearer.

    Any failure answers 400 with `{error, details}`.
    """
    try:
        admin = service.bootstrap_admin()
    except Exception as e:
        logger.exception("Admin bootstrap failed")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Admin bootstrap failed", "details": str(e)}
        )

    return AdminBootstrapRead(success=True, email=admin.email, user_id=admin.id)
