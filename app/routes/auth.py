"""认证相关路由（身份认证只负责给出用户ID和角色）"""
from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy import or_

from app.extensions import db
from app.models import User
from app.services.log_service import LogService
from app.utils import request_data

bp = Blueprint('auth', __name__, url_prefix='/auth')


@bp.route('/login', methods=['POST'])
def login():
    """登录"""
    data = request_data()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    # 支持用户名、学号、工号登录
    user = User.query.filter(or_(
        User.username == username,
        User.student_number == username,
        User.employee_number == username
    )).first() if username else None

    if user and user.is_active and user.check_password(password):
        login_user(user)
        LogService.log_operation('login', f'用户 {user.username} 登录', result='success')
        return jsonify({'success': True, 'user': user.to_dict()})

    LogService.log_operation('login', f'登录失败：{username}', result='failed', error_msg='用户名或密码错误')
    return jsonify({'success': False, 'code': 'InvalidCredentials',
                    'message': '用户名或密码错误，或者账户已被禁用'}), 401


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """登出"""
    LogService.log_operation('logout', f'用户 {current_user.username} 登出')
    logout_user()
    return jsonify({'success': True})


@bp.route('/me')
@login_required
def me():
    """当前用户信息"""
    return jsonify({'success': True, 'user': current_user.to_dict()})


@bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """修改密码"""
    data = request_data()
    current_password = data.get('current_password') or ''
    new_password = data.get('new_password') or ''

    if not current_user.check_password(current_password):
        return jsonify({'success': False, 'code': 'InvalidCredentials', 'message': '当前密码错误'}), 400
    if len(new_password) < 6:
        return jsonify({'success': False, 'code': 'ValidationError', 'message': '新密码长度至少6位'}), 400
    if new_password == current_password:
        return jsonify({'success': False, 'code': 'ValidationError', 'message': '新密码不能与当前密码相同'}), 400

    current_user.set_password(new_password)
    db.session.commit()
    LogService.log_operation('update', '修改密码')
    return jsonify({'success': True, 'message': '密码修改成功'})
