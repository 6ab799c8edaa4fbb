from typing import Any, Optional, Union
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from ..config import Settings
from ..deps import (
    enforce_rate_limit,
    get_cache_from_request,
    get_code_verification_service,
    get_link_verification_service,
    get_settings,
    require_rate_limit,
)
from ..exceptions import AttemptsExhausted, ChallengeExpired, VerificationError
from ..logging_config import get_logger
from ..schemas.verification import (
    SendLinkRequest,
    SendResponse,
    UserData,
    VerificationRequest,
    VerifyResponse,
)
from ..services.verification_service import VerificationService

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["verification"])


async def _json_object(request: Request) -> dict:
    try:
        body = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid request body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid request body")
    return body


@router.post(
    "/verification",
    response_model=Union[VerifyResponse, SendResponse],
    response_model_exclude_none=True,
)
async def verification(
    request: Request,
    code_svc: VerificationService = Depends(get_code_verification_service),
    settings: Settings = Depends(get_settings),
    cache: Any = Depends(get_cache_from_request),
):
    """Send or check a 4-digit email code, depending on ``action``."""
    body = await _json_object(request)
    try:
        req = VerificationRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid request body")

    try:
        if req.action == "send":
            await enforce_rate_limit(request, cache, settings, scope="send")
            issued = await code_svc.send_code(req.email, req.nickname)
            return SendResponse(
                message="Verification code sent",
                code=issued.secret if code_svc.expose_secrets else None,
            )

        if req.action == "verify":
            user = await code_svc.verify(req.email, req.code)
            return VerifyResponse(
                userData=UserData(email=user.get("email", ""), nickname=user.get("nickname", ""))
            )
    except VerificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("verification_request_failed", action=req.action, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    raise HTTPException(status_code=400, detail="Invalid action")


@router.post(
    "/send-verification-email", response_model=SendResponse, response_model_exclude_none=True
)
async def send_verification_email(
    request: Request,
    link_svc: VerificationService = Depends(get_link_verification_service),
    settings: Settings = Depends(get_settings),
    _rl: None = Depends(require_rate_limit),
):
    """Email a one-time confirmation link for tournament entry."""
    body = await _json_object(request)
    try:
        req = SendLinkRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid request body")

    base_url = settings.api_base_url or str(request.base_url)
    tournament_id: Optional[str] = (
        str(req.tournament_id) if req.tournament_id is not None else None
    )
    try:
        issued = await link_svc.send_link(req.email, req.nickname, base_url, tournament_id)
    except VerificationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception("send_verification_link_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return SendResponse(
        message="メール認証を送信しました。メールを確認してエントリーを完了してください。",
        token=issued.secret if link_svc.expose_secrets else None,
    )


def _frontend_redirect(settings: Settings, path: str, params: dict) -> RedirectResponse:
    url = f"{settings.frontend_url.rstrip('/')}{path}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


@router.get("/verify-email")
async def verify_email(
    token: Optional[str] = None,
    email: Optional[str] = None,
    link_svc: VerificationService = Depends(get_link_verification_service),
    settings: Settings = Depends(get_settings),
):
    """Confirm a link from a verification email and bounce the browser back to the app."""
    if not token or not email:
        return _frontend_redirect(settings, "/", {"error": "invalid_token"})

    try:
        entry = await link_svc.verify(email, token)
    except ChallengeExpired:
        return _frontend_redirect(settings, "/", {"error": "expired_token"})
    except AttemptsExhausted:
        return _frontend_redirect(settings, "/", {"error": "too_many_attempts"})
    except VerificationError:
        return _frontend_redirect(settings, "/", {"error": "invalid_token"})
    except Exception as e:
        logger.exception("verify_email_link_failed", error=str(e))
        return _frontend_redirect(settings, "/", {"error": "verification_failed"})

    params = {"verified": "true", "nickname": entry.get("nickname", "")}
    if entry.get("tournament_id"):
        params["tournamentId"] = entry["tournament_id"]
    return _frontend_redirect(settings, "/tournament-waiting", params)
