import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from quick_entry.api.dependencies import get_service
from quick_entry.api.schemas import LearnRequest, PrefillRequest
from quick_entry.logger import get_logger
from quick_entry.manager import EntryParserService
from quick_entry.models import LearnedPref, Prefill, TransactionDraft

logger = get_logger(__name__)

router = APIRouter()


@router.post("/prefill", response_model=Prefill)
async def prefill_form(
    req: PrefillRequest,
    service: Annotated[EntryParserService, Depends(get_service)],
) -> Prefill:
    return await service.prefill(
        req.description,
        req.type,
        req.accounts,
        req.categories,
        touched=set(req.touched),
        today=req.today,
        local_only=req.local_only,
    )


@router.post("/learn", response_model=TransactionDraft)
async def learn_submission(
    req: LearnRequest,
    service: Annotated[EntryParserService, Depends(get_service)],
) -> TransactionDraft:
    draft = await asyncio.to_thread(service.learn, req.submission, req.accounts, req.today)
    logger.info(f"[LEARN] Stored {draft.type} entry '{draft.description}' ({draft.category})")
    return draft


@router.get("/preferences", response_model=dict[str, LearnedPref])
async def list_preferences(
    service: Annotated[EntryParserService, Depends(get_service)],
) -> dict[str, LearnedPref]:
    return dict(service.store.prefs)
