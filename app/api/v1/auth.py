import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.api.v1.errors import to_http
from app.api.v1.schemas import AdminCodeRequestSchema, AdminCodeVerifySchema, SessionSchema, SessionTokenSchema
from app.application.exceptions import SchedulingError
from app.application.ports.session_tokens import SessionTokenPort
from app.application.use_cases.admin_login import AdminLoginUseCase
from app.wiring.dependencies import get_admin_login_use_case, get_session_tokens

router = APIRouter()
logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def optional_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    tokens: SessionTokenPort = Depends(get_session_tokens),
) -> str | None:
    """Administrator email from a valid bearer token, None otherwise."""
    if credentials is None:
        return None
    claims = tokens.verify(credentials.credentials)
    if not claims or claims.get("role") != "admin":
        return None
    return claims.get("sub")


def require_admin(admin: str | None = Depends(optional_admin)) -> str:
    if admin is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Administrator session required"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return admin


@router.post("/auth/request-code", status_code=202)
def request_code(
    req: AdminCodeRequestSchema,
    uc: AdminLoginUseCase = Depends(get_admin_login_use_case),
):
    try:
        sent = uc.request_code(req.email)
    except SchedulingError as e:
        raise to_http(e)
    if not sent:
        raise HTTPException(
            status_code=502,
            detail={"code": "delivery_failed", "message": "The login code could not be sent"},
        )
    return {"status": "sent"}


@router.post("/auth/verify-code", response_model=SessionTokenSchema)
def verify_code(
    req: AdminCodeVerifySchema,
    uc: AdminLoginUseCase = Depends(get_admin_login_use_case),
):
    try:
        token = uc.verify_code(req.email, req.code)
    except SchedulingError as e:
        raise to_http(e)
    logger.info("Administrator signed in")
    return SessionTokenSchema(token=token)


@router.get("/auth/session", response_model=SessionSchema)
def session(admin: str | None = Depends(optional_admin)):
    return SessionSchema(valid=admin is not None, email=admin)
