from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import os
import shutil
import time
from models.messaging.message_models import AttachmentKind

logger = logging.getLogger(__name__)

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")


@dataclass(frozen=True)
class Attachment:
	kind: AttachmentKind
	path: str
	name: str


def attachment_kind(mime_type: Optional[str]) -> AttachmentKind:
	mime_type = (mime_type or "").lower()
	if mime_type.startswith("text/"):
		return AttachmentKind.text
	if mime_type == "application/pdf":
		return AttachmentKind.pdf
	if mime_type.startswith("video/"):
		return AttachmentKind.video
	if mime_type.startswith("audio/"):
		return AttachmentKind.voice
	return AttachmentKind.other


def store_upload(upload, upload_dir: str = None) -> Attachment:
	"""Copy an uploaded file into the uploads directory.

	The file is stored as ``<epoch millis>-<original name>`` and referenced by
	its public ``/uploads/...`` path.
	"""
	uploads_dir = Path(upload_dir or UPLOAD_DIR)
	uploads_dir.mkdir(parents=True, exist_ok=True)
	original_name = os.path.basename(upload.filename or "file")
	file_name = f"{int(time.time() * 1000)}-{original_name}"
	file_path = uploads_dir / file_name
	with open(file_path, "wb") as buffer:
		shutil.copyfileobj(upload.file, buffer)
	logger.info("Stored attachment %s (%s)", file_name, upload.content_type)
	return Attachment(
		kind=attachment_kind(upload.content_type),
		path=f"/uploads/{file_name}",
		name=original_name,
	)
