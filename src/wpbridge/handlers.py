"""
FastAPI surface for the auth bridge.

    app.include_router(create_auth_router(bridge), prefix="/auth")
"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from wpbridge.errors import AuthenticationError
from wpbridge.session import WordPressAuthBridge, WordPressAuthSession


def create_auth_router(bridge: WordPressAuthBridge) -> APIRouter:
    router = APIRouter()

    @router.post("/login")
    async def login(request: Request, response: Response, payload: dict[str, Any] = Body(...)) -> Any:
        try:
            result = await bridge.login_action(payload, request, response)
        except ValidationError as e:
            return JSONResponse(
                status_code=422,
                content={
                    "error": "BAD_REQUEST",
                    "detail": e.errors(include_url=False, include_context=False, include_input=False),
                },
            )
        except AuthenticationError as e:
            return JSONResponse(status_code=e.status, content={"error": e.code, "message": e.message})
        return result.model_dump(by_alias=True)

    @router.post("/logout")
    async def logout(request: Request, response: Response) -> dict[str, bool]:
        await bridge.clear_authentication(response, bridge.session_id_from_request(request))
        return {"success": True}

    @router.get("/me")
    async def me(request: Request) -> dict[str, Any]:
        user = await bridge.resolve_user_by_session_id(bridge.session_id_from_request(request))
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return user.to_api_dict()

    return router


def get_session_dependency(
    bridge: WordPressAuthBridge,
) -> Callable[[Request], Awaitable[WordPressAuthSession | None]]:
    """
    FastAPI dependency resolving the caller's session from the bridge cookie.

    Use with: Depends(get_session_dependency(bridge))
    """

    async def dependency(request: Request) -> WordPressAuthSession | None:
        return await bridge.get_session(bridge.session_id_from_request(request))

    return dependency
