"""Tests for AttendanceService: check-in status, uniqueness and visibility."""
from datetime import time

import pytest

from app.errors import DuplicateCheckIn, NotEnrolled, CheckInNotOpen, RoleNotPermitted, TaskNotFound
from app.models import CheckIn, CheckInStatus
from app.services import AttendanceService

from conftest import TASK_DAY


def test_check_in_before_start_is_on_time(school, make_task, at):
    task = make_task(school.course_a)
    record = AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 20))
    assert record.status == CheckInStatus.ON_TIME


def test_check_in_exactly_at_start_is_on_time(school, make_task, at):
    task = make_task(school.course_a)
    record = AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 30))
    assert record.status == CheckInStatus.ON_TIME


def test_check_in_after_start_is_late(school, make_task, at):
    task = make_task(school.course_a, start=time(8, 30))
    record = AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 40))
    assert record.status == CheckInStatus.LATE
    # 存储的是UTC时间
    assert record.check_in_time == at(TASK_DAY, 8, 40)
    assert record.check_in_time.hour == 0


def test_task_without_start_time_is_always_on_time(school, make_task, at):
    task = make_task(school.course_a, start=None, end=None)
    record = AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 17, 0))
    assert record.status == CheckInStatus.ON_TIME


def test_duplicate_check_in_keeps_single_row(school, make_task, at):
    task = make_task(school.course_a)
    AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 0))

    with pytest.raises(DuplicateCheckIn):
        AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 9, 0))

    rows = CheckIn.query.filter_by(student_id=school.alice.principal_id, task_id=task.id).all()
    assert len(rows) == 1
    assert rows[0].status == CheckInStatus.ON_TIME


def test_concurrent_duplicate_rejected_by_unique_index(school, make_task, at, monkeypatch):
    task = make_task(school.course_a)
    AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 0))

    class NoExisting:
        """另一请求尚未提交时，预检查看不到已有记录"""
        def filter_by(self, **kwargs):
            return self

        def first(self):
            return None

    monkeypatch.setattr(CheckIn, 'query', NoExisting())
    with pytest.raises(DuplicateCheckIn):
        AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 5))
    monkeypatch.undo()

    rows = CheckIn.query.filter_by(student_id=school.alice.principal_id, task_id=task.id).all()
    assert len(rows) == 1
    assert rows[0].check_in_time == at(TASK_DAY, 8, 0)


def test_check_in_requires_enrollment(school, make_task, at):
    task = make_task(school.course_a)
    with pytest.raises(NotEnrolled):
        AttendanceService.record_check_in(school.dave, task.id, now=at(TASK_DAY, 8, 0))
    assert CheckIn.query.count() == 0


def test_check_in_before_scheduled_date_is_refused(school, make_task, at):
    task = make_task(school.course_a)
    with pytest.raises(CheckInNotOpen):
        AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY.replace(day=1), 20, 0))


def test_later_day_compares_start_time_on_check_in_date(school, make_task, at):
    # 补打卡按打卡当天的开始时间判断
    task = make_task(school.course_a, start=time(8, 30))
    next_day = TASK_DAY.replace(day=3)
    early = AttendanceService.record_check_in(school.alice, task.id, now=at(next_day, 8, 0))
    assert early.status == CheckInStatus.ON_TIME

    late = AttendanceService.record_check_in(school.bob, task.id, now=at(next_day, 9, 0))
    assert late.status == CheckInStatus.LATE


def test_only_students_check_in(school, make_task, at):
    task = make_task(school.course_a)
    with pytest.raises(RoleNotPermitted):
        AttendanceService.record_check_in(school.t1, task.id, now=at(TASK_DAY, 8, 0))


def test_unknown_task(school, at):
    with pytest.raises(TaskNotFound):
        AttendanceService.record_check_in(school.alice, 999, now=at(TASK_DAY, 8, 0))


def test_visibility_by_role(school, make_task, at):
    task_a = make_task(school.course_a)
    task_b = make_task(school.course_b)
    AttendanceService.record_check_in(school.alice, task_a.id, now=at(TASK_DAY, 8, 0))
    AttendanceService.record_check_in(school.bob, task_a.id, now=at(TASK_DAY, 8, 45))
    AttendanceService.record_check_in(school.dave, task_b.id, now=at(TASK_DAY, 8, 0))

    assert [c.student_id for c in AttendanceService.check_ins_visible_to(school.alice)] == \
        [school.alice.principal_id]
    assert {c.task_id for c in AttendanceService.check_ins_visible_to(school.t1)} == {task_a.id}
    assert {c.task_id for c in AttendanceService.check_ins_visible_to(school.t2)} == {task_b.id}
    assert len(AttendanceService.check_ins_visible_to(school.admin)) == 3

    # 按时间倒序
    records = AttendanceService.check_ins_visible_to(school.t1)
    assert records[0].student_id == school.bob.principal_id

    summary = AttendanceService.attendance_summary(records)
    assert summary == {'total': 2, 'on_time': 1, 'late': 1, 'absent': 0}


def test_visibility_date_filter_uses_local_days(school, make_task, at):
    task = make_task(school.course_a)
    # 本地03-02 07:00 = UTC 03-01 23:00
    AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 7, 0))

    assert len(AttendanceService.check_ins_visible_to(school.admin, date_from=TASK_DAY, date_to=TASK_DAY)) == 1
    previous_day = TASK_DAY.replace(day=1)
    assert AttendanceService.check_ins_visible_to(school.admin, date_to=previous_day) == []
