"""权限装饰器"""
from functools import wraps
from flask import jsonify
from flask_login import current_user
from app.errors import CoreError


def require_role(*roles):
    """要求特定角色的装饰器（管理员不自动放行，由服务层决定）"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'success': False, 'code': 'Unauthenticated', 'message': '请先登录'}), 401
            if current_user.role not in roles:
                return jsonify({'success': False, 'code': 'RoleNotPermitted',
                                'message': '您没有权限访问此接口'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_admin(f):
    """要求管理员权限"""
    return require_role('admin')(f)


def require_teacher_or_admin(f):
    """要求教师或管理员权限"""
    return require_role('teacher', 'admin')(f)


def log_operation(operation_type, operation_desc=None):
    """
    记录操作日志的装饰器

    Args:
        operation_type: 操作类型（check_in, submit, evaluate等）
        operation_desc: 操作描述（可选，如果不提供则使用函数名）
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            from app.services.log_service import LogService

            desc = operation_desc if operation_desc else f.__name__
            try:
                result = f(*args, **kwargs)
            except CoreError as e:
                LogService.log_operation(operation_type, desc, result='failed', error_msg=e.code)
                raise  # 交给错误处理器转换为JSON
            LogService.log_operation(operation_type, desc, result='success')
            return result

        return decorated_function
    return decorator
