"""Tests for RegistryService: course assignment and visibility."""
import pytest

from app.errors import AdminRequired, CourseNotFound, UserNotFound, ValidationError
from app.services import RegistryService


def test_courses_visible_by_role(school):
    assert RegistryService.courses_visible_to(school.alice) == {school.course_a}
    assert RegistryService.courses_visible_to(school.dave) == {school.course_b}
    assert RegistryService.courses_visible_to(school.t1) == {school.course_a}
    assert RegistryService.courses_visible_to(school.admin) == {school.course_a, school.course_b}


def test_assign_replaces_previous_set(school):
    saved = RegistryService.assign_courses(school.admin, school.alice.principal_id, [school.course_b])
    assert saved == {school.course_b}
    assert RegistryService.courses_visible_to(school.alice) == {school.course_b}


def test_assign_teacher_courses(school):
    RegistryService.assign_courses(
        school.admin, school.t2.principal_id, [school.course_a, school.course_b, school.course_a])
    assert RegistryService.courses_visible_to(school.t2) == {school.course_a, school.course_b}


def test_assign_empty_clears(school):
    RegistryService.assign_courses(school.admin, school.t1.principal_id, [])
    assert RegistryService.courses_visible_to(school.t1) == set()


def test_assign_requires_admin(school):
    with pytest.raises(AdminRequired):
        RegistryService.assign_courses(school.t1, school.alice.principal_id, [school.course_b])
    assert RegistryService.courses_visible_to(school.alice) == {school.course_a}


def test_assign_unknown_course_keeps_previous(school):
    with pytest.raises(CourseNotFound):
        RegistryService.assign_courses(school.admin, school.alice.principal_id, [school.course_b, 999])
    assert RegistryService.courses_visible_to(school.alice) == {school.course_a}


def test_assign_unknown_user(school):
    with pytest.raises(UserNotFound):
        RegistryService.assign_courses(school.admin, 999, [school.course_a])


def test_assign_to_admin_is_rejected(school):
    with pytest.raises(ValidationError):
        RegistryService.assign_courses(school.admin, school.admin.principal_id, [school.course_a])


def test_roster_and_counts(school):
    roster = RegistryService.roster_by_course({school.course_a, school.course_b})
    assert roster[school.course_a] == {
        school.alice.principal_id, school.bob.principal_id, school.carol.principal_id}
    assert roster[school.course_b] == {school.dave.principal_id}
    assert RegistryService.enrolled_student_count({school.course_a, school.course_b}) == 4
    assert RegistryService.enrolled_student_count(set()) == 0
    assert RegistryService.students_of({school.course_b}) == {school.dave.principal_id}
