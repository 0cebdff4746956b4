from typing import Annotated

from fastapi import APIRouter, Depends

from quick_entry.api.dependencies import get_service
from quick_entry.api.schemas import CategorizeRequest, CategorizeResponse, ParseRequest
from quick_entry.manager import EntryParserService
from quick_entry.models import ParsedInput

router = APIRouter()


@router.post("/parse", response_model=ParsedInput | None)
async def parse_entry(
    req: ParseRequest,
    service: Annotated[EntryParserService, Depends(get_service)],
) -> ParsedInput | None:
    return await service.parse(
        req.text,
        req.accounts,
        req.categories,
        today=req.today,
        local_only=req.local_only,
    )


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize_description(
    req: CategorizeRequest,
    service: Annotated[EntryParserService, Depends(get_service)],
) -> CategorizeResponse:
    category = await service.suggest_category(
        req.description,
        req.type,
        req.categories,
        local_only=req.local_only,
    )
    return CategorizeResponse(category=category)
