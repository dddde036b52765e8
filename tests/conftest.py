"""Shared pytest fixtures.

Provides:
- ``app``: Flask app on in-memory SQLite with all tables created
- ``client``: test client bound to ``app``
- ``school``: one major, two courses, two teachers, four students
- ``make_task``: factory for training tasks
- ``login``: logs the test client in as a user
- ``at``: converts a local (UTC+8) wall-clock time to the naive UTC ``now`` services accept
"""
from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace

import pytest

from app import create_app
from app.extensions import db
from app.models import User, UserRole, Major, Course, TrainingTask
from app.utils import Principal

TASK_DAY = date(2026, 3, 2)
LOCAL_TZ = timezone(timedelta(hours=8))


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(username, role, real_name, password='secret123', **fields):
    user = User(username=username, role=role, real_name=real_name, **fields)
    user.set_password(password)
    db.session.add(user)
    return user


@pytest.fixture
def school(app):
    """Course A: teacher t1, students alice/bob/carol. Course B: teacher t2, student dave."""
    admin = _user('admin', UserRole.ADMIN, '管理员')
    t1 = _user('t1', UserRole.TEACHER, '王老师', employee_number='T001')
    t2 = _user('t2', UserRole.TEACHER, '李老师', employee_number='T002')
    alice = _user('alice', UserRole.STUDENT, 'Alice', student_number='S001')
    bob = _user('bob', UserRole.STUDENT, 'Bob', student_number='S002')
    carol = _user('carol', UserRole.STUDENT, 'Carol', student_number='S003')
    dave = _user('dave', UserRole.STUDENT, 'Dave', student_number='S004')

    major = Major(name='机电一体化')
    course_a = Course(name='PLC编程实训', major=major)
    course_b = Course(name='数控加工实训', major=major)
    db.session.add_all([major, course_a, course_b])

    course_a.teachers.append(t1)
    course_a.students.extend([alice, bob, carol])
    course_b.teachers.append(t2)
    course_b.students.append(dave)
    db.session.commit()

    def principal(user):
        return Principal(principal_id=user.id, role=user.role)

    return SimpleNamespace(
        admin=principal(admin), t1=principal(t1), t2=principal(t2),
        alice=principal(alice), bob=principal(bob), carol=principal(carol), dave=principal(dave),
        major_id=major.id, course_a=course_a.id, course_b=course_b.id,
    )


@pytest.fixture
def make_task(app):
    counter = {'n': 0}

    def _make(course_id, scheduled_date=TASK_DAY, start=time(8, 30), end=time(11, 30), name=None):
        counter['n'] += 1
        task = TrainingTask(
            task_number=f'RW-{counter["n"]:03d}',
            name=name or f'任务{counter["n"]}',
            course_id=course_id,
            scheduled_date=scheduled_date,
            start_time=start,
            end_time=end,
        )
        db.session.add(task)
        db.session.commit()
        return task

    return _make


def local_to_utc(day, hour, minute=0):
    """本地时间 -> 服务层使用的naive UTC时间"""
    local = datetime.combine(day, time(hour, minute), tzinfo=LOCAL_TZ)
    return local.astimezone(timezone.utc).replace(tzinfo=None)


@pytest.fixture
def at():
    return local_to_utc


@pytest.fixture
def login(client):
    def _login(username, password='secret123'):
        return client.post('/auth/login', json={'username': username, 'password': password})
    return _login
