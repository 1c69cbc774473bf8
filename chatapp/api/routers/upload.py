from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from chatapp.api.deps import get_app_settings, log_error
from chatapp.config import Settings
from chatapp.models.api_io import UploadResponse
from chatapp.services import upload as uploads
from chatapp.services.errors import InvalidRequest, PayloadTooLarge

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_file(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_app_settings),
):
    """Stores an attachment and returns its URL plus a content analysis. No session required."""
    try:
        stored = await uploads.save_upload(file, Path(settings.upload_dir), settings.max_upload_bytes)
        mime_type = file.content_type or "application/octet-stream"
        analysis = uploads.analyze_file(stored, file.filename, mime_type)
    except PayloadTooLarge as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except InvalidRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log_error("Error uploading file", e)
        raise HTTPException(status_code=500, detail="Failed to upload file")
    finally:
        await file.close()

    return UploadResponse(
        url=uploads.file_url(stored.name),
        filename=stored.name,
        original_name=file.filename,
        size=analysis.metadata.size,
        type=mime_type,
        analysis=analysis,
    )
