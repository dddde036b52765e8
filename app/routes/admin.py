"""管理员路由：控制台统计、用户课程分配、批量导入"""
from datetime import timedelta

from flask import Blueprint, jsonify, request
from flask_login import login_required

from app.errors import InvalidImportFile
from app.models import User
from app.services import RegistryService, ReportService, ImportService
from app.utils import current_principal, request_data, parse_id_list, date_arg, local_now
from app.utils.decorators import require_admin, log_operation

bp = Blueprint('admin', __name__, url_prefix='/admin')


@bp.route('/dashboard')
@login_required
@require_admin
def dashboard():
    """管理员控制台：今日与最近7天概况"""
    principal = current_principal()
    today = local_now().date()
    return jsonify({
        'success': True,
        'today': ReportService.report_window(today, today, principal=principal).to_dict(),
        'week': ReportService.report_window(today - timedelta(days=6), today, principal=principal).to_dict(),
        'scores': ReportService.score_statistics(principal)
    })


@bp.route('/statistics')
@login_required
@require_admin
def statistics():
    """指定日期区间的统计（start/end为本地日期，含两端）"""
    today = local_now().date()
    start = date_arg('start') or today
    end = date_arg('end') or start
    report = ReportService.report_window(start, end, principal=current_principal())
    return jsonify({'success': True, 'report': report.to_dict()})


@bp.route('/users')
@login_required
@require_admin
def users():
    """用户列表，可按角色过滤"""
    query = User.query
    role = request.args.get('role')
    if role:
        query = query.filter_by(role=role)
    items = query.order_by(User.role.asc(), User.id.asc()).all()
    return jsonify({'success': True, 'users': [u.to_dict() for u in items]})


@bp.route('/users/<int:user_id>/courses', methods=['PUT'])
@login_required
@require_admin
@log_operation('assign', '分配课程')
def assign_courses(user_id):
    """保存用户的课程分配（整体替换）"""
    data = request_data()
    course_ids = RegistryService.assign_courses(
        current_principal(), user_id, parse_id_list(data.get('course_ids')))
    return jsonify({'success': True, 'course_ids': sorted(course_ids)})


@bp.route('/users/batch-import', methods=['POST'])
@login_required
@require_admin
@log_operation('import', '批量导入用户')
def batch_import():
    """批量导入用户（CSV/TSV/XLSX）"""
    file = request.files.get('file')
    if file is None or not file.filename:
        raise InvalidImportFile('请选择要导入的文件')
    result = ImportService.import_users(current_principal(), file.read(), file.filename)
    return jsonify({'success': True, **result})
