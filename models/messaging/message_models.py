from sqlalchemy import Column, String, DateTime, Text, Enum, Boolean, Index
from datetime import datetime
from db import Base
import enum


class Role(enum.Enum):
    teacher = "Teacher"
    student = "Student"

    @property
    def counterpart(self):
        return Role.student if self is Role.teacher else Role.teacher


class AttachmentKind(enum.Enum):
    text = "text"
    pdf = "pdf"
    video = "video"
    voice = "voice"
    other = "other"


class DirectMessage(Base):
    __tablename__ = "direct_messages"
    __table_args__ = (
        Index("ix_direct_messages_pair_sent_at", "sender_id", "receiver_id", "sent_at"),
    )

    message_id = Column(String, primary_key=True, index=True)
    sender_id = Column(String, nullable=False)
    sender_role = Column(Enum(Role), nullable=False)
    receiver_id = Column(String, nullable=False)
    receiver_role = Column(Enum(Role), nullable=False)
    content = Column(Text, nullable=True)
    # attachment columns are set together or not at all
    attachment_kind = Column(Enum(AttachmentKind), nullable=True)
    attachment_path = Column(String, nullable=True)
    attachment_name = Column(String, nullable=True)
    # correlation tag only, retrieval groups by the participant pair
    conversation_id = Column(String, nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<DirectMessage(message_id={self.message_id}, sender_id={self.sender_id}, receiver_id={self.receiver_id})>"
