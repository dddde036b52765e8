"""实训成果提交路由"""
from flask import Blueprint, jsonify, request
from flask_login import login_required

from app.errors import MissingField, ValidationError
from app.services import SubmissionService
from app.utils import current_principal, request_data
from app.utils.decorators import require_role, log_operation

bp = Blueprint('submission', __name__, url_prefix='/submissions')


def _int_arg(name):
    return request.args.get(name, type=int)


def _task_id(data):
    """请求体中的任务ID"""
    try:
        return int(data['task_id'])
    except KeyError:
        raise MissingField('请指定实训任务', field='task_id')
    except (TypeError, ValueError):
        raise ValidationError('任务ID格式不正确', field='task_id')


@bp.route('/')
@login_required
def list_submissions():
    """提交列表：学生看自己的，教师看任课课程的，管理员看全部"""
    items = SubmissionService.submissions_visible_to(
        current_principal(),
        status=request.args.get('status') or None,
        course_id=_int_arg('course_id'),
        task_id=_int_arg('task_id'),
        search=request.args.get('search')
    )
    return jsonify({'success': True, 'submissions': [s.to_dict() for s in items]})


@bp.route('/', methods=['POST'])
@login_required
@require_role('student')
@log_operation('submit', '提交实训成果')
def submit():
    data = request_data()
    submission = SubmissionService.submit(
        current_principal(),
        _task_id(data),
        content=data.get('content'),
        artifact_urls=data.get('artifact_urls')
    )
    return jsonify({'success': True, 'submission': submission.to_dict()}), 201


@bp.route('/<int:submission_id>')
@login_required
def detail(submission_id):
    submission = SubmissionService.get_submission(current_principal(), submission_id)
    return jsonify({'success': True, 'submission': submission.to_dict()})


@bp.route('/<int:submission_id>', methods=['PUT'])
@login_required
@require_role('student')
@log_operation('submit', '修改实训成果')
def amend(submission_id):
    """修改待评价的提交"""
    data = request_data()
    submission = SubmissionService.amend(
        current_principal(),
        submission_id,
        content=data.get('content'),
        artifact_urls=data.get('artifact_urls')
    )
    return jsonify({'success': True, 'submission': submission.to_dict()})
