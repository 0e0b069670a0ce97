from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Security, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from verified_auth.application.emailpass_verified import EmailPassVerifiedProvider
from verified_auth.domain.errors import UnsupportedOperation
from verified_auth.domain.results import AuthResult
from verified_auth.infrastructure.redis_cache.sessions import RedisSessions, Session
from verified_auth.presentation.dependencies import get_provider, get_sessions
from verified_auth.schemas.requests import AuthenticateIn, UpdateCredentialIn
from verified_auth.schemas.responses import AuthOut

router = APIRouter(
    prefix=f"/auth/{EmailPassVerifiedProvider.identifier}", tags=["Auth"]
)
bearer_scheme = HTTPBearer()


def _failure(result: AuthResult, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=AuthOut.from_result(result).model_dump(exclude_none=True),
    )


async def _with_session(
    result: AuthResult, sessions: RedisSessions, entity_id: str
) -> AuthOut:
    token = None
    if result.auth_identity is not None and result.auth_identity.id is not None:
        token = await sessions.create(
            Session(
                identity_id=result.auth_identity.id,
                entity_id=entity_id,
                provider=EmailPassVerifiedProvider.identifier,
            )
        )
    return AuthOut.from_result(result, token=token)


@router.post("/register")
async def post_register(
    body: dict[str, Any],
    provider: Annotated[EmailPassVerifiedProvider, Depends(get_provider)],
):
    try:
        provider.register(body)
    except UnsupportedOperation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("", response_model=AuthOut, response_model_exclude_none=True)
async def post_authenticate(
    body: AuthenticateIn,
    provider: Annotated[EmailPassVerifiedProvider, Depends(get_provider)],
    sessions: Annotated[RedisSessions, Depends(get_sessions)],
):
    result = await provider.authenticate(body.model_dump(exclude_none=True))
    if not result.success:
        return _failure(result, status.HTTP_401_UNAUTHORIZED)
    return await _with_session(result, sessions, entity_id=body.email or "")


@router.get("/callback", response_model=AuthOut, response_model_exclude_none=True)
async def get_callback(
    provider: Annotated[EmailPassVerifiedProvider, Depends(get_provider)],
    code: Annotated[str | None, Query()] = None,
    email: Annotated[str | None, Query()] = None,
):
    query = {key: value for key, value in (("code", code), ("email", email)) if value is not None}
    result = await provider.validate_callback(query)
    if not result.success:
        return _failure(result, status.HTTP_401_UNAUTHORIZED)
    # the code proves nothing about `email` when the identity already exists,
    # so no session here; the client signs in with its password next
    return AuthOut.from_result(result)


async def _session_for(token: str, sessions: RedisSessions) -> Session:
    session = await sessions.get(token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid or expired token"
        )
    return session


@router.post("/update", response_model=AuthOut, response_model_exclude_none=True)
async def post_update(
    body: UpdateCredentialIn,
    provider: Annotated[EmailPassVerifiedProvider, Depends(get_provider)],
    sessions: Annotated[RedisSessions, Depends(get_sessions)],
    auth: HTTPAuthorizationCredentials = Security(bearer_scheme),
):
    session = await _session_for(auth.credentials, sessions)
    if body.entity_id is not None and body.entity_id != session.entity_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="token does not belong to this identity",
        )

    result = await provider.update_credential(body.model_dump(exclude_none=True))
    if not result.success:
        return _failure(result, status.HTTP_400_BAD_REQUEST)
    return AuthOut.from_result(result)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def post_logout(
    sessions: Annotated[RedisSessions, Depends(get_sessions)],
    auth: HTTPAuthorizationCredentials = Security(bearer_scheme),
) -> None:
    await _session_for(auth.credentials, sessions)
    await sessions.revoke(auth.credentials)
