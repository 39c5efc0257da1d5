from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base

class Student(Base):
	__tablename__ = "students"

	student_id = Column(String, primary_key=True, index=True)
	first_name = Column(String, nullable=False)
	last_name = Column(String, nullable=False)
	profile_photo = Column(String, nullable=True)  # File path to profile photo
	# a student belongs to at most one class at a time
	class_id = Column(String, ForeignKey("classrooms.class_id"), nullable=True, index=True)
	created_at = Column(DateTime, default=datetime.utcnow)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

	classroom = relationship("Classroom", back_populates="students")

	@property
	def full_name(self):
		return f"{self.first_name} {self.last_name}"

	def __repr__(self):
		return f"<Student(student_id={self.student_id}, class_id={self.class_id})>"
