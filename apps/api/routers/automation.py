"""
Automation router: runs one Instagram action for the signed-in user.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from routers.auth_scope import AuthContext, get_auth_context, get_orchestrator
from services.automation import AutomationOrchestrator

router = APIRouter()


@router.post("/run")
async def run_automation(
    payload: Dict[str, Any] = Body(...),
    auth: AuthContext = Depends(get_auth_context),
    orchestrator: AutomationOrchestrator = Depends(get_orchestrator),
):
    """
    Run an automation action.

    Body: {"type": "<action kind>", ...action parameters}. Parameters are
    accepted in camelCase ("postUrl") or snake_case ("post_url").
    """
    params = dict(payload)
    action_type = params.pop("type", None) or ""
    result = await orchestrator.dispatch(auth.user_id, action_type, params)

    if result.status == "client_error":
        return JSONResponse(status_code=400, content=result.outcome.to_payload())
    if result.status == "server_error":
        content = result.outcome.to_payload()
        content["error"] = result.error
        return JSONResponse(status_code=500, content=content)
    return result.outcome.to_payload()
