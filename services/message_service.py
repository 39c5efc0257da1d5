"""Direct message persistence and the paginated conversation read path."""
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from models.messaging.message_models import DirectMessage, Role
from services import enrollment_directory
from services.attachments import Attachment
from services.contact_resolver import is_authorized_pair, parse_role
from services.errors import Unauthorized, ValidationError
from services.message_id_generator import generate_conversation_id, generate_message_id

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


def _positive_int(name: str, value) -> int:
	if isinstance(value, bool) or not isinstance(value, int) or value < 1:
		raise ValidationError(f"{name} must be a positive integer")
	return value


def send_message(
	db: Session,
	sender_id: str,
	sender_role,
	receiver_id: str,
	receiver_role,
	content: Optional[str] = None,
	attachment: Optional[Attachment] = None,
) -> DirectMessage:
	sender_role = parse_role(sender_role)
	receiver_role = parse_role(receiver_role)

	if not is_authorized_pair(db, sender_id, sender_role, receiver_id, receiver_role):
		raise Unauthorized("You can only chat with authorized contacts")

	if not content and attachment is None:
		raise ValidationError("Message content or attachment is required")

	msg = DirectMessage(
		message_id=generate_message_id(),
		sender_id=sender_id,
		sender_role=sender_role,
		receiver_id=receiver_id,
		receiver_role=receiver_role,
		content=content or None,
		attachment_kind=attachment.kind if attachment else None,
		attachment_path=attachment.path if attachment else None,
		attachment_name=attachment.name if attachment else None,
		conversation_id=generate_conversation_id(),
		sent_at=datetime.utcnow(),
		read=False,
	)
	db.add(msg)
	db.commit()
	db.refresh(msg)
	logger.info("Message %s persisted: %s -> %s", msg.message_id, sender_id, receiver_id)
	return msg


def mark_read(db: Session, reader_id: str, counterpart_id: str) -> int:
	"""Flip every unread counterpart -> reader message to read. Idempotent."""
	updated = (
		db.query(DirectMessage)
		.filter(
			DirectMessage.sender_id == counterpart_id,
			DirectMessage.receiver_id == reader_id,
			DirectMessage.read.is_(False),
		)
		.update({DirectMessage.read: True}, synchronize_session="fetch")
	)
	db.commit()
	return updated


def get_conversation(
	db: Session,
	user_id: str,
	user_role,
	counterpart_id: str,
	page: int = DEFAULT_PAGE,
	limit: int = DEFAULT_LIMIT,
) -> List[DirectMessage]:
	page = _positive_int("page", page)
	limit = _positive_int("limit", limit)
	user_role = parse_role(user_role)

	if not is_authorized_pair(db, user_id, user_role, counterpart_id, user_role.counterpart):
		raise Unauthorized("You can only view conversations with authorized contacts")

	# read-state changes before the page is computed
	mark_read(db, user_id, counterpart_id)

	return (
		db.query(DirectMessage)
		.filter(
			or_(
				and_(DirectMessage.sender_id == user_id, DirectMessage.receiver_id == counterpart_id),
				and_(DirectMessage.sender_id == counterpart_id, DirectMessage.receiver_id == user_id),
			)
		)
		.order_by(DirectMessage.sent_at.asc(), DirectMessage.message_id.asc())
		.offset((page - 1) * limit)
		.limit(limit)
		.all()
	)


def resolve_name(db: Session, role: Role, user_id: str) -> Optional[str]:
	if role is Role.teacher:
		record = enrollment_directory.get_teacher(db, user_id)
	else:
		record = enrollment_directory.get_student(db, user_id)
	return record.full_name if record else None


def participant_names(db: Session, messages: List[DirectMessage]) -> Dict[str, Optional[str]]:
	"""Display names for every sender and receiver, one lookup per participant."""
	names: Dict[str, Optional[str]] = {}
	for m in messages:
		for user_id, role in ((m.sender_id, m.sender_role), (m.receiver_id, m.receiver_role)):
			if user_id not in names:
				names[user_id] = resolve_name(db, role, user_id)
	return names


def message_to_dict(msg: DirectMessage, names: Optional[Dict[str, Optional[str]]] = None) -> Dict[str, Any]:
	attachment = None
	if msg.attachment_path:
		attachment = {
			"kind": msg.attachment_kind.value if msg.attachment_kind else None,
			"path": msg.attachment_path,
			"name": msg.attachment_name,
		}
	data = {
		"message_id": msg.message_id,
		"sender_id": msg.sender_id,
		"sender_role": msg.sender_role.value,
		"receiver_id": msg.receiver_id,
		"receiver_role": msg.receiver_role.value,
		"content": msg.content,
		"attachment": attachment,
		"conversation_id": msg.conversation_id,
		"sent_at": msg.sent_at.isoformat(),
		"read": msg.read,
	}
	if names is not None:
		data["sender_name"] = names.get(msg.sender_id)
		data["receiver_name"] = names.get(msg.receiver_id)
	return data
