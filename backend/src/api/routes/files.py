"""Public download route behind durable object-store URLs."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from ...services.container import ServiceContainer, get_services
from ...services.object_store import ObjectNotFoundError

router = APIRouter(tags=["files"])


@router.get("/files/{path:path}")
async def download_file(path: str, services: ServiceContainer = Depends(get_services)):
    try:
        data, content_type = services.objects.read(path)
    except (ObjectNotFoundError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "file_not_found", "message": f"File not found: {path}"},
        ) from exc
    return Response(content=data, media_type=content_type)


__all__ = ["router"]
