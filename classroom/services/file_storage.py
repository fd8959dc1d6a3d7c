import logging
import os
import uuid
from fastapi import UploadFile
from typing import Optional, Tuple

from classroom.core.config.settings import get_settings
from classroom.utils.helpers import sanitize_filename

logger = logging.getLogger(__name__)

# Sent by clients that do not know the type; the extension check still applies
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}

class FileStorage:
    def __init__(self, upload_dir: Optional[str] = None):
        settings = get_settings()
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.url_prefix = settings.UPLOAD_URL_PREFIX.rstrip("/")
        self.max_size = settings.MAX_UPLOAD_SIZE
        self.allowed_extensions = {ext.lower() for ext in settings.ALLOWED_EXTENSIONS}
        self.allowed_content_types = settings.ALLOWED_CONTENT_TYPES

        # Create upload directory if it doesn't exist
        os.makedirs(self.upload_dir, exist_ok=True)

    @staticmethod
    def has_file(file: Optional[UploadFile]) -> bool:
        """Browsers post an empty file part when nothing was picked"""
        return file is not None and bool(file.filename)

    def _get_file_extension(self, filename: str) -> str:
        return os.path.splitext(filename)[1].lower()

    def is_allowed_file(self, filename: str, content_type: Optional[str] = None) -> bool:
        if self._get_file_extension(filename) not in self.allowed_extensions:
            return False
        content_type = (content_type or "").split(";")[0].strip().lower()
        return content_type in GENERIC_CONTENT_TYPES or content_type in self.allowed_content_types

    async def save_file(self, file: UploadFile) -> Tuple[bool, str]:
        """
        Validate an uploaded file and write it under a unique name

        Nothing is written when the file is rejected.

        Args:
            file: The uploaded file

        Returns:
            Tuple of (success, public URL or error message)
        """
        filename = sanitize_filename(file.filename or "")
        if not filename or not self.is_allowed_file(filename, file.content_type):
            return False, "File type not allowed"

        # Read one byte past the limit to detect oversized uploads without buffering all of them
        content = await file.read(self.max_size + 1)
        if len(content) > self.max_size:
            return False, f"File size exceeds {self.max_size // (1024 * 1024)}MB limit"

        unique_filename = f"{uuid.uuid4()}-{filename}"
        file_path = os.path.join(self.upload_dir, unique_filename)
        try:
            with open(file_path, "wb") as buffer:
                buffer.write(content)
        except OSError as e:
            logger.error("Failed to store upload %s: %s", unique_filename, e)
            return False, "File upload failed"

        logger.info("Stored upload %s (%d bytes)", unique_filename, len(content))
        return True, f"{self.url_prefix}/{unique_filename}"

    def delete_file(self, file_url: str) -> bool:
        """
        Delete a stored file by its public URL

        Args:
            file_url: URL returned by ``save_file``

        Returns:
            True if deletion was successful, False otherwise
        """
        filename = os.path.basename(file_url)
        file_path = os.path.join(self.upload_dir, filename)
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
                return True
            return False
        except OSError as e:
            logger.warning("Failed to delete upload %s: %s", filename, e)
            return False

file_storage = FileStorage()
