from sqlalchemy import Column, String, DateTime
from datetime import datetime
from db import Base

class Teacher(Base):
	__tablename__ = "teachers"

	teacher_id = Column(String, primary_key=True, index=True)
	first_name = Column(String, nullable=False)
	last_name = Column(String, nullable=False)
	profile_photo = Column(String, nullable=True)  # File path to profile photo
	created_at = Column(DateTime, default=datetime.utcnow)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

	@property
	def full_name(self):
		return f"{self.first_name} {self.last_name}"

	def __repr__(self):
		return f"<Teacher(teacher_id={self.teacher_id}, full_name={self.full_name})>"
