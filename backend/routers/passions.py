"""Onboarding endpoints for picking passions."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from backend.auth import get_current_user
from backend.models.passions import PassionOption, PassionsResponse, SavePassionsRequest
from backend.progress_db import save_passions
from backend.services.passions import PASSION_OPTIONS, clean_passions, get_user_passions

router = APIRouter(prefix="/api/passions", tags=["Passions"])


@router.get("/options", response_model=List[PassionOption])
async def get_passion_options():
    return PASSION_OPTIONS


@router.get("", response_model=PassionsResponse)
async def get_passions(user_id: str = Depends(get_current_user)):
    return PassionsResponse(passions=await get_user_passions(user_id))


@router.put("", response_model=PassionsResponse)
async def put_passions(
    request: SavePassionsRequest,
    user_id: str = Depends(get_current_user)
):
    """Store the user's passions (at least one, at most six)."""
    passions = clean_passions(request.passions)
    if not passions:
        raise HTTPException(status_code=400, detail="Pick at least one passion")

    if not await save_passions(user_id, passions):
        raise HTTPException(status_code=503, detail="Couldn't save, try again.")
    return PassionsResponse(passions=passions)
