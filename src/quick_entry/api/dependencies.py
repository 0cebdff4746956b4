from fastapi import HTTPException, Request

from quick_entry.manager import EntryParserService


def get_service(request: Request) -> EntryParserService:
    service = getattr(request.app.state, "service", None)
    if not service:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return service
