"""学生相关路由：今日任务、打卡、查看评价"""
from flask import Blueprint, jsonify
from flask_login import login_required

from app.services import TaskService, AttendanceService, SubmissionService, EvaluationService
from app.utils import current_principal, date_arg
from app.utils.decorators import require_role, log_operation

bp = Blueprint('student', __name__, url_prefix='/student')


def _task_rows(principal, tasks):
    """任务列表附带当前学生的打卡与提交状态"""
    task_ids = [t.id for t in tasks]
    checked = AttendanceService.checked_in_task_ids(principal.principal_id, task_ids)
    submitted = SubmissionService.submitted_task_ids(principal.principal_id, task_ids)
    rows = []
    for task in tasks:
        row = task.to_dict()
        row['checked_in'] = task.id in checked
        row['submitted'] = task.id in submitted
        rows.append(row)
    return rows


@bp.route('/tasks/today')
@login_required
@require_role('student')
def today_tasks():
    """今日任务（按开始时间升序）"""
    principal = current_principal()
    tasks = TaskService.today_tasks(principal)
    return jsonify({'success': True, 'tasks': _task_rows(principal, tasks)})


@bp.route('/tasks')
@login_required
@require_role('student')
def tasks():
    """已选课程的全部任务，可按日期过滤"""
    principal = current_principal()
    items = TaskService.tasks_visible_to(
        principal,
        date_from=date_arg('date_from'),
        date_to=date_arg('date_to')
    )
    return jsonify({'success': True, 'tasks': _task_rows(principal, items)})


@bp.route('/check-in/<int:task_id>', methods=['POST'])
@login_required
@require_role('student')
@log_operation('check_in', '学生打卡')
def check_in(task_id):
    """打卡"""
    record = AttendanceService.record_check_in(current_principal(), task_id)
    return jsonify({'success': True, 'check_in': record.to_dict()}), 201


@bp.route('/check-ins')
@login_required
@require_role('student')
def check_ins():
    """我的打卡记录"""
    records = AttendanceService.check_ins_visible_to(current_principal())
    return jsonify({
        'success': True,
        'check_ins': [r.to_dict() for r in records],
        'summary': AttendanceService.attendance_summary(records)
    })


@bp.route('/evaluations')
@login_required
@require_role('student')
def evaluations():
    """我收到的评价"""
    items = EvaluationService.evaluations_visible_to(current_principal())
    return jsonify({'success': True, 'evaluations': [e.to_dict() for e in items]})
