from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from server.core.request_guard import run_guarded
from server.models.responses import UploadResponse

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload", status_code=201)
async def upload_document(request: Request, file: UploadFile | None = File(None)) -> UploadResponse:
    """Extract, chunk, embed and store an uploaded file.

    Args:
        request (Request): FastAPI request (provides app.state.upload_service).
        file (UploadFile | None): The multipart "file" field.

    Returns:
        UploadResponse: Confirmation with the generated document id.

    Raises:
        HTTPException: 400 without a file, 500/504 if processing fails.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded.")

    data = await file.read()
    source_name = file.filename or "upload"
    upload_service = request.app.state.upload_service
    document_id = await run_guarded(
        request,
        upload_service.do_upload(data, source_name),
        failure_message="Failed to process the uploaded file.",
    )
    return UploadResponse(message="File processed and stored successfully.", document_id=document_id)
