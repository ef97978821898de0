"""
Participant page endpoints

A QR code points at GET /clue?clue=<n>. The response describes the page state;
pages that wait for input carry a page_id for the follow-up POSTs.
"""
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel
from typing import Optional
import logging

from treasure_hunt import state
from treasure_hunt.api.cookies import apply_cookie_changes
from treasure_hunt.core.engine import HuntPage
from treasure_hunt.models import PageView
from treasure_hunt.services.pages import open_page


router = APIRouter(tags=["hunt"])
logger = logging.getLogger(__name__)

PAGE_EXPIRED = "Page expired. Please reload."


class RegistrationRequest(BaseModel):
    team_name: Optional[str] = None
    group_name: Optional[str] = None


class AnswerRequest(BaseModel):
    answer: Optional[str] = None


def _get_page(page_id: str) -> HuntPage:
    page = state.PAGES.get(page_id)
    if page is None:
        raise HTTPException(status_code=404, detail=PAGE_EXPIRED)
    return page


def _finish(page: HuntPage, view: PageView, response: Response) -> PageView:
    state.PAGES.release(page)
    apply_cookie_changes(response, page.identity_store.cache)
    return view


@router.get("/clue", response_model=PageView)
async def open_clue(request: Request, response: Response, clue: Optional[str] = None):
    """
    Open the page for a scanned QR code

    Response: PageView, e.g.
        {"state": "answering", "page_id": "...", "position": 2, "question": "...", "editable": true}
        {"state": "blocked", "required_position": 2, "message": "You must solve Clue #2 first."}
    """
    page = open_page(request.cookies)
    view = await page.load(clue)
    state.PAGES.keep(page)
    apply_cookie_changes(response, page.identity_store.cache)
    return view


@router.post("/pages/{page_id}/register", response_model=PageView)
async def register_on_page(page_id: str, payload: RegistrationRequest, response: Response):
    """Submit the team name (and group) on a registering page"""
    page = _get_page(page_id)
    view = await page.register(payload.team_name, payload.group_name)
    state.PAGES.keep(page)
    return _finish(page, view, response)


@router.post("/pages/{page_id}/answer", response_model=PageView)
async def answer_on_page(page_id: str, payload: AnswerRequest, request: Request, response: Response):
    """
    Submit an answer on an answering page

    Response (CORRECT): {"state": "advancing", "feedback": "correct", "hint": "..."}
    Response (WRONG):   {"state": "answering", "feedback": "wrong", "message": "Try again!"}
    """
    page = _get_page(page_id)
    try:
        view = await page.submit_answer(payload.answer)
    except Exception as e:
        client_ip = request.client.host if request.client else "unknown"
        logger.error(
            f"❌ ERROR in answer for page {page_id} from {client_ip}\n"
            f"Error: {str(e)}\n"
            f"Error Type: {type(e).__name__}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
    return _finish(page, view, response)
