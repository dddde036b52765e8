"""Tests for CourseService: majors, courses and explicit delete cascade."""
import pytest

from app.errors import AdminRequired, CourseNotFound, DuplicateName, MajorNotFound, MissingField
from app.extensions import db
from app.models import CheckIn, Course, Evaluation, Submission, TrainingTask
from app.services import (
    AttendanceService, CourseService, EvaluationService, RegistryService, SubmissionService
)

from conftest import TASK_DAY


def test_create_major_and_course(school):
    major = CourseService.create_major(school.admin, ' 电气自动化 ')
    course = CourseService.create_course(school.admin, '电工实训', major.id, description='基础')
    assert major.name == '电气自动化'
    assert course.to_dict()['major_name'] == '电气自动化'
    assert [c.id for c in CourseService.list_courses(major.id)] == [course.id]


def test_duplicate_major_name(school):
    with pytest.raises(DuplicateName):
        CourseService.create_major(school.admin, '机电一体化')


def test_course_requires_existing_major(school):
    with pytest.raises(MajorNotFound):
        CourseService.create_course(school.admin, '电工实训', 999)


def test_course_name_required(school):
    with pytest.raises(MissingField):
        CourseService.create_course(school.admin, '  ', school.major_id)


def test_only_admin_manages_courses(school):
    with pytest.raises(AdminRequired):
        CourseService.create_course(school.t1, '电工实训', school.major_id)


def test_update_course(school):
    course = CourseService.update_course(school.admin, school.course_a, name='PLC高级实训', description='')
    assert course.name == 'PLC高级实训'
    assert course.description is None


def test_delete_course_cascades(school, make_task, at):
    task = make_task(school.course_a)
    other_task = make_task(school.course_b)
    AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 0))
    AttendanceService.record_check_in(school.dave, other_task.id, now=at(TASK_DAY, 8, 0))
    first = SubmissionService.submit(school.alice, task.id, content='a')
    SubmissionService.submit(school.bob, task.id, content='b')
    EvaluationService.evaluate(school.t1, first.id, 88)

    removed = CourseService.delete_course(school.admin, school.course_a)

    assert removed == {
        'evaluations': 1, 'submissions': 2, 'check_ins': 1, 'tasks': 1,
        'enrollments': 3, 'assignments': 1,
    }
    assert db.session.get(Course, school.course_a) is None
    assert TrainingTask.query.count() == 1
    assert CheckIn.query.count() == 1
    assert Submission.query.count() == 0
    assert Evaluation.query.count() == 0
    assert RegistryService.courses_visible_to(school.alice) == set()
    assert RegistryService.courses_visible_to(school.t1) == set()
    assert RegistryService.courses_visible_to(school.dave) == {school.course_b}


def test_delete_missing_course(school):
    with pytest.raises(CourseNotFound):
        CourseService.delete_course(school.admin, 999)


def test_delete_major_removes_its_courses(school, make_task):
    make_task(school.course_a)
    make_task(school.course_b)
    totals = CourseService.delete_major(school.admin, school.major_id)
    assert totals['tasks'] == 2
    assert totals['enrollments'] == 4
    assert Course.query.count() == 0
    assert CourseService.list_majors() == []
