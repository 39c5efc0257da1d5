from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from pathlib import Path
from datetime import datetime
from pydantic import BaseModel
from db import get_db
from models.messaging.message_models import Role, AttachmentKind
from services import attachments
from services.contact_resolver import authorized_contacts
from services.errors import MessagingError
from services.identity import CurrentUser, get_current_user
from services.message_service import send_message, get_conversation, message_to_dict, participant_names

router = APIRouter(prefix="/api/messages", tags=["Messages"])


# Pydantic Schemas
class ContactOut(BaseModel):
	id: str
	role: Role
	first_name: str
	last_name: str
	display_name: str
	profile_photo: Optional[str] = None

	class Config:
		from_attributes = True


class AttachmentOut(BaseModel):
	kind: AttachmentKind
	path: str
	name: Optional[str] = None


class MessageOut(BaseModel):
	message_id: str
	sender_id: str
	sender_role: Role
	receiver_id: str
	receiver_role: Role
	content: Optional[str] = None
	attachment: Optional[AttachmentOut] = None
	conversation_id: str
	sent_at: datetime
	read: bool
	sender_name: Optional[str] = None
	receiver_name: Optional[str] = None


class SendMessageResponse(BaseModel):
	message: str
	data: MessageOut


def _http_error(err: MessagingError) -> HTTPException:
	return HTTPException(status_code=err.status_code, detail=err.detail)


# Get contacts the current user may message
@router.get("/contacts", response_model=List[ContactOut])
def get_contacts(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		contacts = authorized_contacts(db, user.user_id, user.role)
	except MessagingError as e:
		raise _http_error(e)
	return [ContactOut.model_validate(c) for c in contacts]


# Send a message, optionally with a file attachment
@router.post("/send", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
async def post_message(
	receiver_id: str = Form(...),
	receiver_role: str = Form(...),
	content: Optional[str] = Form(None),
	file: Optional[UploadFile] = File(None),
	user: CurrentUser = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	attachment = None
	if file is not None and file.filename:
		attachment = attachments.store_upload(file)

	try:
		msg = send_message(
			db,
			sender_id=user.user_id,
			sender_role=user.role,
			receiver_id=receiver_id,
			receiver_role=receiver_role,
			content=content,
			attachment=attachment,
		)
	except MessagingError as e:
		if attachment is not None:
			stored = Path(attachments.UPLOAD_DIR) / Path(attachment.path).name
			stored.unlink(missing_ok=True)
		raise _http_error(e)

	return {"message": "Message sent successfully", "data": message_to_dict(msg, participant_names(db, [msg]))}


# Get the conversation with one contact, oldest first
@router.get("/{contact_id}", response_model=List[MessageOut])
def get_messages(
	contact_id: str,
	page: int = Query(1),
	limit: int = Query(20),
	user: CurrentUser = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	try:
		msgs = get_conversation(db, user.user_id, user.role, contact_id, page=page, limit=limit)
	except MessagingError as e:
		raise _http_error(e)
	names = participant_names(db, msgs)
	return [message_to_dict(m, names) for m in msgs]
