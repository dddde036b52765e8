"""主路由"""
from flask import Blueprint, jsonify
from flask_login import current_user

bp = Blueprint('main', __name__)


@bp.route('/')
def index():
    """首页：返回当前登录状态"""
    if current_user.is_authenticated:
        return jsonify({'success': True, 'user': current_user.to_dict()})
    return jsonify({'success': True, 'user': None})
