"""Who may message whom.

A student may message the teachers of their class; a teacher may message the
students of every class they teach. Nothing here is cached: enrollment can
change between requests, so every check re-derives the contact set.
"""
from dataclasses import dataclass
import logging
from typing import Callable, Dict, List, Optional, Set, Union
from sqlalchemy.orm import Session
from models.messaging.message_models import Role
from services import enrollment_directory
from services.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
	id: str
	role: Role
	first_name: str
	last_name: str
	profile_photo: Optional[str] = None

	@property
	def display_name(self) -> str:
		return f"{self.first_name} {self.last_name}"


def parse_role(value: Union[str, Role, None]) -> Role:
	"""Accept a Role or its wire value ("Teacher" / "Student")."""
	if isinstance(value, Role):
		return value
	try:
		return Role(value)
	except ValueError:
		raise ValidationError(f"Invalid user type: {value!r}")


def _student_contacts(db: Session, student_id: str) -> List[Contact]:
	student = enrollment_directory.get_student(db, student_id)
	if not student:
		raise NotFound("Student not found")
	if not student.class_id:
		raise NotFound("Class not found")
	classroom = enrollment_directory.get_classroom(db, student.class_id)
	if not classroom:
		raise NotFound("Class not found")

	return [
		Contact(
			id=t.teacher_id,
			role=Role.teacher,
			first_name=t.first_name,
			last_name=t.last_name,
			profile_photo=t.profile_photo,
		)
		for t in enrollment_directory.teachers_of_class(db, classroom.class_id)
	]


def _teacher_contacts(db: Session, teacher_id: str) -> List[Contact]:
	teacher = enrollment_directory.get_teacher(db, teacher_id)
	if not teacher:
		raise NotFound("Teacher not found")

	class_ids = enrollment_directory.classes_taught_by(db, teacher_id)
	contacts: Dict[str, Contact] = {}
	for s in enrollment_directory.students_in_classes(db, class_ids):
		if s.student_id in contacts:
			continue
		contacts[s.student_id] = Contact(
			id=s.student_id,
			role=Role.student,
			first_name=s.first_name,
			last_name=s.last_name,
			profile_photo=s.profile_photo,
		)
	return list(contacts.values())


_RESOLVERS: Dict[Role, Callable[[Session, str], List[Contact]]] = {
	Role.student: _student_contacts,
	Role.teacher: _teacher_contacts,
}


def authorized_contacts(db: Session, user_id: str, user_role) -> List[Contact]:
	role = parse_role(user_role)
	return _RESOLVERS[role](db, user_id)


def authorized_contact_ids(db: Session, user_id: str, user_role) -> Set[str]:
	return {c.id for c in authorized_contacts(db, user_id, user_role)}


def is_authorized_pair(db: Session, user_id: str, user_role, counterpart_id: str, counterpart_role) -> bool:
	role = parse_role(user_role)
	other = parse_role(counterpart_role)
	if role is other:
		return False
	allowed = counterpart_id in authorized_contact_ids(db, user_id, role)
	if not allowed:
		logger.warning(
			"Rejected pair %s (%s) -> %s (%s)", user_id, role.value, counterpart_id, other.value
		)
	return allowed
