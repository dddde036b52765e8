"""操作日志路由"""
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required

from app.models import UserRole
from app.services.log_service import LogService
from app.utils import date_arg
from app.utils.decorators import require_role
from app.utils.helpers import local_date_range_to_utc

bp = Blueprint('logs', __name__, url_prefix='/logs')

# 操作类型列表
OPERATION_TYPES = [
    ('login', '登录'),
    ('logout', '登出'),
    ('check_in', '打卡'),
    ('submit', '提交成果'),
    ('evaluate', '评价'),
    ('assign', '分配课程'),
    ('import', '导入'),
    ('template', '评语模板'),
    ('create', '创建'),
    ('update', '更新'),
    ('delete', '删除'),
]


@bp.route('/')
@login_required
@require_role(UserRole.ADMIN)
def index():
    """日志列表 - 仅管理员可访问"""
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', current_app.config['DEFAULT_PER_PAGE'], type=int)
    if per_page not in current_app.config['PER_PAGE_OPTIONS']:
        per_page = current_app.config['DEFAULT_PER_PAGE']

    # 本地日期转换为UTC区间（包含结束日期当天）
    start_date = date_arg('start_date')
    end_date = date_arg('end_date')
    utc_start = local_date_range_to_utc(start_date, start_date)[0] if start_date else None
    utc_end = local_date_range_to_utc(end_date, end_date)[1] if end_date else None

    pagination = LogService.get_logs(
        page=page,
        per_page=per_page,
        user_id=request.args.get('user_id', type=int),
        operation_type=request.args.get('operation_type'),
        start_date=utc_start,
        end_date=utc_end
    )

    return jsonify({
        'success': True,
        'logs': [log.to_dict() for log in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'total': pagination.total,
        'operation_types': [{'type': t, 'label': label} for t, label in OPERATION_TYPES]
    })


@bp.route('/stats')
@login_required
@require_role(UserRole.ADMIN)
def stats():
    """日志统计数据 - 用于图表展示"""
    return jsonify({'success': True, **LogService.get_operation_stats()})
