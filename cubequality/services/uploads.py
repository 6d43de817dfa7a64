from pathlib import Path

from fastapi import HTTPException, UploadFile, status

from cubequality.core.config import get_settings
from cubequality.schemas.report import MediaBlob

CHUNK_SIZE = 1024 * 1024

SPREADSHEET_EXTENSIONS = {".xlsx", ".xlsm"}
SPREADSHEET_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroEnabled.12",
    "application/octet-stream",
}
MEDIA_CONTENT_PREFIXES = ("image/", "video/")


async def read_upload(file: UploadFile) -> bytes:
    settings = get_settings()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            await file.close()
            raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File exceeds max size")
        chunks.append(chunk)
    await file.close()
    return b"".join(chunks)


async def read_spreadsheet_upload(file: UploadFile) -> bytes:
    ext = Path(file.filename or "").suffix.lower()
    if ext not in SPREADSHEET_EXTENSIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please upload an Excel workbook (.xlsx)")
    if file.content_type and file.content_type not in SPREADSHEET_CONTENT_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid content type: {file.content_type}")
    return await read_upload(file)


async def read_media_upload(file: UploadFile) -> MediaBlob:
    content_type = file.content_type or ""
    if not content_type.startswith(MEDIA_CONTENT_PREFIXES):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid content type: {content_type}")
    data = await read_upload(file)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    return MediaBlob(content_type=content_type, data=data)
