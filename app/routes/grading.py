"""教师评价相关路由：评价提交、批量评价、评语模板、考勤与统计"""
from flask import Blueprint, jsonify, request
from flask_login import login_required

from app.errors import MissingField, ValidationError
from app.services import (
    EvaluationService, TemplateService, AttendanceService, ReportService, SubmissionService
)
from app.utils import current_principal, request_data, parse_id_list, date_arg, local_now
from app.utils.decorators import require_role, require_teacher_or_admin, log_operation

bp = Blueprint('grading', __name__, url_prefix='/teacher')


def _comment_from(principal, data):
    """评语：指定了模板时使用模板原文，否则使用填写的评语"""
    template_id = data.get('template_id')
    if template_id:
        try:
            template_id = int(template_id)
        except (TypeError, ValueError):
            raise ValidationError('模板ID格式不正确', field='template_id')
        return TemplateService.resolve_comment(principal, template_id)
    return data.get('comment')


@bp.route('/submissions')
@login_required
@require_role('teacher')
def pending_submissions():
    """任课课程的提交，默认只看待评价的"""
    items = SubmissionService.submissions_visible_to(
        current_principal(),
        status=request.args.get('status', 'pending') or None,
        course_id=request.args.get('course_id', type=int),
        task_id=request.args.get('task_id', type=int),
        search=request.args.get('search')
    )
    return jsonify({'success': True, 'submissions': [s.to_dict() for s in items]})


@bp.route('/submissions/<int:submission_id>/evaluate', methods=['POST'])
@login_required
@require_role('teacher')
@log_operation('evaluate', '评价实训成果')
def evaluate(submission_id):
    principal = current_principal()
    data = request_data()
    if data.get('score') is None:
        raise MissingField('请填写评分', field='score')
    evaluation = EvaluationService.evaluate(
        principal, submission_id, data.get('score'), _comment_from(principal, data))
    return jsonify({'success': True, 'evaluation': evaluation.to_dict()}), 201


@bp.route('/evaluate-batch', methods=['POST'])
@login_required
@require_role('teacher')
@log_operation('evaluate', '批量评价实训成果')
def evaluate_batch():
    """批量评价：同一分数和评语应用到多条提交，逐条返回结果"""
    principal = current_principal()
    data = request_data()
    submission_ids = parse_id_list(data.get('submission_ids'))
    if not submission_ids:
        raise MissingField('请选择要评价的提交', field='submission_ids')
    if data.get('score') is None:
        raise MissingField('请填写评分', field='score')

    results = EvaluationService.evaluate_batch(
        principal, submission_ids, data.get('score'), _comment_from(principal, data))
    return jsonify({
        'success': True,
        'results': [r.to_dict() for r in results],
        'summary': EvaluationService.summarize(results)
    })


@bp.route('/evaluations/<int:evaluation_id>', methods=['PUT'])
@login_required
@require_role('teacher')
@log_operation('evaluate', '修改评价')
def update_evaluation(evaluation_id):
    data = request_data()
    evaluation = EvaluationService.update_evaluation(
        current_principal(), evaluation_id, score=data.get('score'), comment=data.get('comment'))
    return jsonify({'success': True, 'evaluation': evaluation.to_dict()})


@bp.route('/evaluations')
@login_required
@require_teacher_or_admin
def evaluations():
    items = EvaluationService.evaluations_visible_to(current_principal())
    return jsonify({'success': True, 'evaluations': [e.to_dict() for e in items]})


# ---------------------------------------------------------------------------
# 评语模板
# ---------------------------------------------------------------------------

@bp.route('/templates')
@login_required
@require_teacher_or_admin
def templates():
    items = TemplateService.templates_for(current_principal(), request.args.get('category') or None)
    return jsonify({'success': True, 'templates': [t.to_dict() for t in items]})


@bp.route('/templates', methods=['POST'])
@login_required
@require_teacher_or_admin
@log_operation('template', '创建评语模板')
def create_template():
    data = request_data()
    template = TemplateService.create_template(
        current_principal(), data.get('content'), data.get('category'))
    return jsonify({'success': True, 'template': template.to_dict()}), 201


@bp.route('/templates/<int:template_id>', methods=['PUT'])
@login_required
@require_teacher_or_admin
@log_operation('template', '修改评语模板')
def update_template(template_id):
    data = request_data()
    template = TemplateService.update_template(
        current_principal(), template_id, data.get('content'), data.get('category'))
    return jsonify({'success': True, 'template': template.to_dict()})


@bp.route('/templates/<int:template_id>', methods=['DELETE'])
@login_required
@require_teacher_or_admin
@log_operation('template', '删除评语模板')
def delete_template(template_id):
    TemplateService.delete_template(current_principal(), template_id)
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# 考勤与统计
# ---------------------------------------------------------------------------

@bp.route('/attendance')
@login_required
@require_teacher_or_admin
def attendance():
    """任课课程的打卡记录及状态汇总"""
    records = AttendanceService.check_ins_visible_to(
        current_principal(),
        task_id=request.args.get('task_id', type=int),
        date_from=date_arg('date_from'),
        date_to=date_arg('date_to'),
        limit=request.args.get('limit', type=int)
    )
    return jsonify({
        'success': True,
        'check_ins': [r.to_dict() for r in records],
        'summary': AttendanceService.attendance_summary(records)
    })


@bp.route('/statistics')
@login_required
@require_teacher_or_admin
def statistics():
    """任课课程在指定日期区间内的统计，默认为今天"""
    principal = current_principal()
    today = local_now().date()
    start = date_arg('start') or today
    end = date_arg('end') or start
    report = ReportService.report_window(start, end, principal=principal)
    return jsonify({
        'success': True,
        'report': report.to_dict(),
        'scores': ReportService.score_statistics(principal)
    })
