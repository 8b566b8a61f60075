import os
import re
import random
import string
import time
from typing import Optional, Tuple

from fastapi import UploadFile

from app.config import settings

ALLOWED_DOCUMENT_TYPES = [
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
]

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def validate_file(content_type: Optional[str], size: int) -> Tuple[bool, str]:
    """
    Returns: (is_valid, error_message)
    """
    if size > settings.MAX_UPLOAD_SIZE:
        return False, f"File size must be less than {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB"
    if content_type not in ALLOWED_DOCUMENT_TYPES:
        return False, "File type not allowed. Please upload PDF, Word, image, or text files only."
    return True, ""


def generate_file_name(original_name: str, prefix: Optional[str] = None) -> str:
    """prefix_basename_timestamp_random.ext with the base name sanitised"""
    base, _, extension = original_name.rpartition(".")
    if not base:
        base, extension = extension, ""
    safe_base = _UNSAFE_CHARS.sub("_", base)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    name = f"{prefix + '_' if prefix else ''}{safe_base}_{int(time.time() * 1000)}_{suffix}"
    return f"{name}.{extension}" if extension else name


def save_upload(file: UploadFile, subfolder: str, content: bytes, prefix: Optional[str] = None) -> str:
    filename = generate_file_name(file.filename or "upload", prefix)
    folder_path = os.path.join(settings.UPLOAD_DIR, subfolder)

    os.makedirs(folder_path, exist_ok=True)

    file_path = os.path.join(folder_path, filename)

    with open(file_path, "wb") as buffer:
        buffer.write(content)

    return file_path
