"""Team registration endpoints"""
from fastapi import APIRouter, HTTPException, Request, Response

from treasure_hunt.api.cookies import apply_cookie_changes
from treasure_hunt.api.hunt import RegistrationRequest
from treasure_hunt.errors import TransientError, ValidationError
from treasure_hunt.services.pages import identity_store


router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("/register")
async def register(payload: RegistrationRequest, request: Request, response: Response):
    store = identity_store(request.cookies)
    try:
        identity = await store.register(payload.team_name, payload.group_name)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except TransientError as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc
    apply_cookie_changes(response, store.cache)
    return {
        "team_name": identity.team_name,
        "group_name": identity.group_name,
        "message": "Team registered. Scan your first QR code."
    }


@router.post("/forget")
async def forget(request: Request, response: Response):
    store = identity_store(request.cookies)
    store.forget()
    apply_cookie_changes(response, store.cache)
    return {"message": "Team forgotten on this device."}
