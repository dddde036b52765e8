"""Tests for EvaluationService: atomic evaluate, batch results, score rules."""
from datetime import time

import pytest

from app.errors import (
    AlreadyEvaluated, NotAssigned, NotAuthor, RoleNotPermitted, ScoreOutOfRange, SubmissionNotFound
)
from app.extensions import db
from app.models import CheckInStatus, Evaluation, Submission, SubmissionStatus
from app.services import AttendanceService, EvaluationService, RegistryService, SubmissionService

from conftest import TASK_DAY


def _status(submission_id):
    db.session.expire_all()
    return db.session.get(Submission, submission_id).status


def test_check_in_submit_evaluate_scenario(school, make_task, at):
    """打卡迟到 -> 提交 -> 任课教师评价 -> 非任课教师评价被拒"""
    task = make_task(school.course_a, start=time(8, 30))

    check_in = AttendanceService.record_check_in(school.alice, task.id, now=at(TASK_DAY, 8, 40))
    assert check_in.status == CheckInStatus.LATE

    submission = SubmissionService.submit(school.alice, task.id, content='done')
    assert submission.status == SubmissionStatus.PENDING

    evaluation = EvaluationService.evaluate(school.t1, submission.id, 92, 'well done')
    assert evaluation.score == 92
    assert evaluation.comment == 'well done'
    assert _status(submission.id) == SubmissionStatus.EVALUATED

    with pytest.raises(NotAssigned):
        EvaluationService.evaluate(school.t2, submission.id, 50)
    assert Evaluation.query.count() == 1


def test_double_evaluate(school, make_task):
    task = make_task(school.course_a)
    submission = SubmissionService.submit(school.alice, task.id, content='done')
    EvaluationService.evaluate(school.t1, submission.id, 80)

    with pytest.raises(AlreadyEvaluated):
        EvaluationService.evaluate(school.t1, submission.id, 90)
    assert Evaluation.query.filter_by(submission_id=submission.id).one().score == 80


def test_unassigned_teacher_checked_before_score(school, make_task):
    task = make_task(school.course_a)
    submission = SubmissionService.submit(school.alice, task.id, content='done')
    with pytest.raises(NotAssigned):
        EvaluationService.evaluate(school.t2, submission.id, 500)
    assert _status(submission.id) == SubmissionStatus.PENDING


@pytest.mark.parametrize('score', [-1, 101, 'abc', 85.5, True, None])
def test_invalid_score_leaves_submission_pending(school, make_task, score):
    task = make_task(school.course_a)
    submission = SubmissionService.submit(school.alice, task.id, content='done')
    with pytest.raises(ScoreOutOfRange):
        EvaluationService.evaluate(school.t1, submission.id, score)
    assert _status(submission.id) == SubmissionStatus.PENDING
    assert Evaluation.query.count() == 0


@pytest.mark.parametrize('score,expected', [(0, 0), (100, 100), ('75', 75), (60.0, 60)])
def test_score_bounds_and_coercion(app, score, expected):
    assert EvaluationService.validate_score(score) == expected


def test_only_teachers_evaluate(school, make_task):
    task = make_task(school.course_a)
    submission = SubmissionService.submit(school.alice, task.id, content='done')
    with pytest.raises(RoleNotPermitted):
        EvaluationService.evaluate(school.admin, submission.id, 80)


def test_missing_submission(school):
    with pytest.raises(SubmissionNotFound):
        EvaluationService.evaluate(school.t1, 999, 80)


def test_batch_with_one_already_evaluated(school, make_task):
    task = make_task(school.course_a)
    ids = [SubmissionService.submit(s, task.id, content='done').id
           for s in (school.alice, school.bob, school.carol)]
    EvaluationService.evaluate(school.t1, ids[1], 70)

    results = EvaluationService.evaluate_batch(school.t1, ids, 88, '整体表现良好')

    assert [r.submission_id for r in results] == ids
    assert [r.ok for r in results] == [True, False, True]
    assert isinstance(results[1].error, AlreadyEvaluated)
    assert results[1].to_dict()['code'] == 'AlreadyEvaluated'
    assert EvaluationService.summarize(results) == {'total': 3, 'succeeded': 2, 'failed': 1}

    for submission_id in ids:
        assert _status(submission_id) == SubmissionStatus.EVALUATED
    scores = {e.submission_id: e.score for e in Evaluation.query.all()}
    assert scores == {ids[0]: 88, ids[1]: 70, ids[2]: 88}


def test_batch_mixed_failures(school, make_task):
    task_a = make_task(school.course_a)
    task_b = make_task(school.course_b)
    mine = SubmissionService.submit(school.alice, task_a.id, content='a').id
    other = SubmissionService.submit(school.dave, task_b.id, content='d').id

    results = EvaluationService.evaluate_batch(school.t1, [mine, other, 999], 90)
    assert [type(r.error).__name__ if r.error else None for r in results] == \
        [None, 'NotAssigned', 'SubmissionNotFound']
    assert _status(other) == SubmissionStatus.PENDING


def test_update_own_evaluation(school, make_task):
    task = make_task(school.course_a)
    submission = SubmissionService.submit(school.alice, task.id, content='done')
    evaluation = EvaluationService.evaluate(school.t1, submission.id, 70, '一般')

    updated = EvaluationService.update_evaluation(school.t1, evaluation.id, score=85, comment=' 更好 ')
    assert updated.score == 85
    assert updated.comment == '更好'
    assert _status(submission.id) == SubmissionStatus.EVALUATED


def test_update_other_teachers_evaluation(school, make_task):
    task = make_task(school.course_a)
    submission = SubmissionService.submit(school.alice, task.id, content='done')
    evaluation = EvaluationService.evaluate(school.t1, submission.id, 70)
    RegistryService.assign_courses(school.admin, school.t2.principal_id, [school.course_a])

    with pytest.raises(NotAuthor):
        EvaluationService.update_evaluation(school.t2, evaluation.id, score=10)


def test_student_sees_own_evaluations(school, make_task):
    task = make_task(school.course_a)
    for student in (school.alice, school.bob):
        submission = SubmissionService.submit(student, task.id, content='done')
        EvaluationService.evaluate(school.t1, submission.id, 90)

    visible = EvaluationService.evaluations_visible_to(school.alice)
    assert len(visible) == 1
    assert visible[0].submission.student_id == school.alice.principal_id
    assert len(EvaluationService.evaluations_visible_to(school.t1)) == 2
    assert EvaluationService.evaluations_visible_to(school.t2) == []


def test_batch_repeated_id_evaluated_once(school, make_task):
    task = make_task(school.course_a)
    submission_id = SubmissionService.submit(school.alice, task.id, content='done').id

    results = EvaluationService.evaluate_batch(school.t1, [submission_id, submission_id], 75)
    assert [r.ok for r in results] == [True, False]
    assert results[1].error.code == 'AlreadyEvaluated'
    assert Evaluation.query.count() == 1


def test_evaluation_rolled_back_when_status_changed_concurrently(school, make_task):
    task = make_task(school.course_a)
    submission = SubmissionService.submit(school.alice, task.id, content='done')
    assert submission.status == SubmissionStatus.PENDING

    # 数据库中的状态已被改为驳回，会话中的对象仍是待评价，预检查可以通过
    Submission.query.filter_by(id=submission.id).update(
        {'status': SubmissionStatus.REJECTED}, synchronize_session=False)

    with pytest.raises(AlreadyEvaluated):
        EvaluationService.evaluate(school.t1, submission.id, 80)

    assert Evaluation.query.count() == 0
    assert _status(submission.id) != SubmissionStatus.EVALUATED
