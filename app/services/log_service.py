"""操作日志服务"""
from flask import request, has_request_context, current_app
from flask_login import current_user
from sqlalchemy import func

from app.extensions import db
from app.models.operation_log import OperationLog
from app.utils.helpers import utc_now, local_now, local_date_range_to_utc


class LogService:
    """日志服务类"""

    @staticmethod
    def log_operation(operation_type, operation_desc, result='success', error_msg=None):
        """
        记录操作日志

        Args:
            operation_type: 操作类型（login, check_in, submit, evaluate, assign等）
            operation_desc: 操作描述
            result: 操作结果（success, failed）
            error_msg: 错误信息
        """
        try:
            ip_address = user_agent = request_method = request_path = None
            if has_request_context():
                ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
                if ip_address and ',' in ip_address:
                    ip_address = ip_address.split(',')[0].strip()
                user_agent = request.headers.get('User-Agent', '')[:500]
                request_method = request.method
                request_path = request.path

            # 获取用户信息
            user_id = None
            username = 'Anonymous'
            user_role = 'guest'
            if has_request_context() and current_user and current_user.is_authenticated:
                user_id = current_user.id
                username = current_user.username
                user_role = current_user.role

            log = OperationLog(
                user_id=user_id,
                username=username,
                user_role=user_role,
                operation_type=operation_type,
                operation_desc=(operation_desc or '')[:500],
                ip_address=ip_address,
                user_agent=user_agent,
                request_method=request_method,
                request_path=request_path,
                result=result,
                error_msg=error_msg,
                created_at=utc_now()
            )
            db.session.add(log)
            db.session.commit()
        except Exception as e:
            # 日志记录失败不应影响主业务
            current_app.logger.error(f"记录日志失败: {e}")
            db.session.rollback()

    @staticmethod
    def get_logs(page=1, per_page=50, user_id=None, operation_type=None, start_date=None, end_date=None):
        """
        获取日志列表

        Args:
            page: 页码
            per_page: 每页数量
            user_id: 用户ID过滤
            operation_type: 操作类型过滤
            start_date: 开始时间（UTC）
            end_date: 结束时间（UTC，不含）
        """
        query = OperationLog.query

        if user_id:
            query = query.filter_by(user_id=user_id)

        if operation_type:
            query = query.filter_by(operation_type=operation_type)

        if start_date:
            query = query.filter(OperationLog.created_at >= start_date)

        if end_date:
            query = query.filter(OperationLog.created_at < end_date)

        # 按时间倒序
        query = query.order_by(OperationLog.created_at.desc(), OperationLog.id.desc())

        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def get_operation_stats():
        """获取操作统计信息"""
        today = local_now().date()
        start, end = local_date_range_to_utc(today, today)
        return {
            'total_logs': OperationLog.query.count(),
            'today_logs': OperationLog.query.filter(
                OperationLog.created_at >= start, OperationLog.created_at < end
            ).count(),
            'operation_type_stats': [
                {'operation_type': op, 'count': count}
                for op, count in db.session.query(
                    OperationLog.operation_type, func.count(OperationLog.id)
                ).group_by(OperationLog.operation_type).all()
            ],
            'user_stats': [
                {'username': name, 'count': count}
                for name, count in db.session.query(
                    OperationLog.username, func.count(OperationLog.id)
                ).filter(
                    OperationLog.user_id.isnot(None)
                ).group_by(OperationLog.username).order_by(
                    func.count(OperationLog.id).desc()
                ).limit(10).all()
            ],
        }
