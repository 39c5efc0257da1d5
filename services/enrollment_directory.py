"""Read-only queries over the class roster (classrooms, class teachers, students)."""
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from models.auth.student_models import Student
from models.auth.teacher_models import Teacher
from models.classroom.classroom_models import Classroom, ClassTeacher


def get_student(db: Session, student_id: str) -> Optional[Student]:
	return db.query(Student).filter(Student.student_id == student_id).first()


def get_teacher(db: Session, teacher_id: str) -> Optional[Teacher]:
	return db.query(Teacher).filter(Teacher.teacher_id == teacher_id).first()


def get_classroom(db: Session, class_id: str) -> Optional[Classroom]:
	return db.query(Classroom).filter(Classroom.class_id == class_id).first()


def teachers_of_class(db: Session, class_id: str) -> List[Teacher]:
	"""Teachers of a class in their listed order.

	Teacher ids with no matching teacher record are skipped.
	"""
	return (
		db.query(Teacher)
		.join(ClassTeacher, ClassTeacher.teacher_id == Teacher.teacher_id)
		.filter(ClassTeacher.class_id == class_id)
		.order_by(ClassTeacher.position.asc(), ClassTeacher.id.asc())
		.all()
	)


def classes_taught_by(db: Session, teacher_id: str) -> List[str]:
	rows = db.query(ClassTeacher.class_id).filter(ClassTeacher.teacher_id == teacher_id).all()
	return [r.class_id for r in rows]


def students_in_classes(db: Session, class_ids: Iterable[str]) -> List[Student]:
	class_ids = list(class_ids)
	if not class_ids:
		return []
	return (
		db.query(Student)
		.filter(Student.class_id.in_(class_ids))
		.order_by(Student.student_id.asc())
		.all()
	)
