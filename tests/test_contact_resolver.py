"""
Tests for contact resolution.

Key business rules:
- A student's contacts are exactly the teachers of their class, in class order
- A teacher's contacts are the students of every class they teach, once each
- Same-role pairs are never authorized
- Authorization is re-derived on every call
"""
import pytest

from models.auth.student_models import Student
from models.classroom.classroom_models import ClassTeacher
from models.messaging.message_models import Role
from services.contact_resolver import (
    authorized_contacts,
    authorized_contact_ids,
    is_authorized_pair,
    parse_role,
)
from services.errors import NotFound, ValidationError


class TestAuthorizedContacts:

    def test_student_sees_class_teachers_in_order(self, enrollment):
        contacts = authorized_contacts(enrollment, "s1", Role.student)

        assert [c.id for c in contacts] == ["t1", "t3"]
        assert all(c.role is Role.teacher for c in contacts)
        assert contacts[0].display_name == "Ada Lovelace"
        assert contacts[0].profile_photo == "uploads/teacher/t1.png"

    def test_teacher_sees_students_of_all_classes_once(self, enrollment):
        contacts = authorized_contacts(enrollment, "t3", "Teacher")

        assert sorted(c.id for c in contacts) == ["s1", "s2", "s3"]
        assert len(contacts) == len({c.id for c in contacts})
        assert all(c.role is Role.student for c in contacts)

    def test_teacher_without_classes_has_no_contacts(self, enrollment):
        assert authorized_contacts(enrollment, "t4", Role.teacher) == []

    def test_student_without_class_not_found(self, enrollment):
        with pytest.raises(NotFound):
            authorized_contacts(enrollment, "s4", Role.student)

    def test_student_with_missing_class_record_not_found(self, enrollment):
        enrollment.add(Student(student_id="s5", first_name="Ned", last_name="Five", class_id="gone"))
        enrollment.commit()

        with pytest.raises(NotFound):
            authorized_contacts(enrollment, "s5", Role.student)

    def test_unknown_users_not_found(self, enrollment):
        with pytest.raises(NotFound):
            authorized_contacts(enrollment, "nobody", Role.student)
        with pytest.raises(NotFound):
            authorized_contacts(enrollment, "nobody", Role.teacher)

    def test_unknown_role_rejected(self, enrollment):
        with pytest.raises(ValidationError):
            authorized_contacts(enrollment, "s1", "Admin")


class TestIsAuthorizedPair:

    @pytest.mark.parametrize("student_id,teacher_id,expected", [
        ("s1", "t1", True),
        ("s1", "t3", True),
        ("s3", "t3", True),
        ("s1", "t2", False),
        ("s3", "t1", False),
    ])
    def test_symmetric(self, enrollment, student_id, teacher_id, expected):
        assert is_authorized_pair(enrollment, student_id, Role.student, teacher_id, Role.teacher) is expected
        assert is_authorized_pair(enrollment, teacher_id, Role.teacher, student_id, Role.student) is expected

    def test_membership_matches_class_link(self, enrollment):
        for student_id in ("s1", "s2", "s3"):
            student = enrollment.get(Student, student_id)
            teacher_ids = {
                r.teacher_id for r in
                enrollment.query(ClassTeacher).filter(ClassTeacher.class_id == student.class_id)
            }
            assert authorized_contact_ids(enrollment, student_id, Role.student) == teacher_ids

    def test_same_role_pairs_rejected(self, enrollment):
        assert is_authorized_pair(enrollment, "s1", Role.student, "s2", Role.student) is False
        assert is_authorized_pair(enrollment, "t1", Role.teacher, "t3", Role.teacher) is False

    def test_reflects_enrollment_changes(self, enrollment):
        assert is_authorized_pair(enrollment, "t2", Role.teacher, "s1", Role.student) is False

        enrollment.add(ClassTeacher(class_id="c1", teacher_id="t2", position=2))
        enrollment.commit()

        assert is_authorized_pair(enrollment, "t2", Role.teacher, "s1", Role.student) is True


def test_parse_role():
    assert parse_role("Teacher") is Role.teacher
    assert parse_role(Role.student) is Role.student
    with pytest.raises(ValidationError):
        parse_role(None)
