from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from supabase import Client

from src.app.deps import CurrentUser, get_current_user, get_supabase
from src.app.domain.errors import AccountDeletionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class AccountDeleted(BaseModel):
    message: str = "User deleted successfully."


@router.get("/me", response_model=CurrentUser)
async def me(user: CurrentUser = Depends(get_current_user)):
    return user


@router.delete("/me", response_model=AccountDeleted)
async def delete_me(
    user: CurrentUser = Depends(get_current_user),
    supa: Client = Depends(get_supabase),
) -> AccountDeleted:
    try:
        await run_in_threadpool(supa.auth.admin.delete_user, user.id)
    except Exception as exc:
        logger.error("Failed to delete user=%s: %s", user.id, exc)
        raise AccountDeletionError(user.id, str(exc)) from exc

    logger.info("User deleted: id=%s", user.id)
    return AccountDeleted()
