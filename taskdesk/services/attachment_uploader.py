"""
Attachment upload boundary and the local-disk implementation.
"""
from fastapi import Request, UploadFile
from typing import List, Protocol
from pathlib import Path
import logging
import os
import shutil
import uuid

from ..exceptions import UploadRejectedError

logger = logging.getLogger(__name__)


class AttachmentUploader(Protocol):
    async def upload(self, file: UploadFile, path_prefix: str) -> str: ...

    async def upload_many(self, files: List[UploadFile], path_prefix: str) -> List[str]: ...


class LocalAttachmentUploader:
    """
    Stores uploads under ``upload_dir`` and returns URLs served by the
    ``/files`` static mount.
    """

    # Allowed file extensions for task attachments and profile photos
    ALLOWED_EXTENSIONS = {
        # Documents
        'pdf', 'doc', 'docx', 'txt', 'rtf', 'md',
        # Spreadsheets
        'xls', 'xlsx', 'csv',
        # Images
        'jpg', 'jpeg', 'png', 'gif', 'webp',
        # Other
        'zip'
    }

    def __init__(self, upload_dir: str, base_url: str = "", max_file_size: int = 10 * 1024 * 1024):
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")
        self.max_file_size = max_file_size

    def _get_file_extension(self, filename: str) -> str:
        """Extract file extension from filename"""
        return filename.rsplit('.', 1)[1].lower() if '.' in filename else ''

    def _validate_file(self, file: UploadFile) -> None:
        ext = self._get_file_extension(file.filename or "")
        if ext not in self.ALLOWED_EXTENSIONS:
            raise UploadRejectedError(
                f"File type .{ext} not allowed. Allowed types: {', '.join(sorted(self.ALLOWED_EXTENSIONS))}"
            )

        if file.size and file.size > self.max_file_size:
            raise UploadRejectedError(
                f"File size exceeds maximum allowed size of {self.max_file_size / (1024 * 1024):.0f}MB"
            )

    async def upload(self, file: UploadFile, path_prefix: str) -> str:
        """Save a single file below ``path_prefix`` and return its public URL."""
        self._validate_file(file)

        prefix = path_prefix.strip("/")
        target_dir = self.upload_dir / prefix
        target_dir.mkdir(parents=True, exist_ok=True)

        unique_filename = f"{uuid.uuid4()}.{self._get_file_extension(file.filename)}"
        file_path = target_dir / unique_filename

        try:
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(file.file, buffer)
        finally:
            await file.close()

        if os.path.getsize(file_path) > self.max_file_size:
            file_path.unlink()
            raise UploadRejectedError(
                f"File size exceeds maximum allowed size of {self.max_file_size / (1024 * 1024):.0f}MB"
            )

        url = f"{self.base_url}/files/{prefix}/{unique_filename}"
        logger.info(f"📎 Stored upload {file.filename} at {url}")
        return url

    async def upload_many(self, files: List[UploadFile], path_prefix: str) -> List[str]:
        """Upload several files in order. Validation runs on all before any is written."""
        for file in files:
            self._validate_file(file)
        return [await self.upload(file, path_prefix) for file in files]


def get_uploader(request: Request) -> AttachmentUploader:
    """Dependency returning the uploader configured for this app."""
    return request.app.state.uploader
