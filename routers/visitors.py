from fastapi import APIRouter, Depends, Request

from repository import FlashcardRepository, get_repository
from schemas import VisitorIn, VisitorOut

router = APIRouter(prefix="/visitors", tags=["Visitors"])


@router.post("/track", response_model=VisitorOut, summary="Record a visit")
async def track_visitor(
    visitor: VisitorIn,
    request: Request,
    repo: FlashcardRepository = Depends(get_repository)
):
    """Count a browser-generated id once; later calls only refresh its activity time.

    The id is chosen by the client and is only good for rough visitor counts.
    """
    row, created = await repo.track_visitor(
        visitor.session_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return VisitorOut(session_id=row.session_id, created=created, last_activity=row.last_activity)
