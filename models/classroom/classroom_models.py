from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base


class Classroom(Base):
    __tablename__ = "classrooms"

    class_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    teachers = relationship(
        "ClassTeacher",
        back_populates="classroom",
        cascade="all, delete-orphan",
        order_by="ClassTeacher.position",
    )
    students = relationship("Student", back_populates="classroom")

    @property
    def teacher_ids(self):
        return [t.teacher_id for t in self.teachers]

    def __repr__(self):
        return f"<Classroom(class_id={self.class_id}, name={self.name})>"


class ClassTeacher(Base):
    __tablename__ = "class_teachers"
    __table_args__ = (UniqueConstraint("class_id", "teacher_id", name="uq_class_teacher"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(String, ForeignKey("classrooms.class_id"), nullable=False, index=True)
    teacher_id = Column(String, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    classroom = relationship("Classroom", back_populates="teachers")

    def __repr__(self):
        return f"<ClassTeacher(class_id={self.class_id}, teacher_id={self.teacher_id}, position={self.position})>"
