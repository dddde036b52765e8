"""应用工厂"""
import os
from flask import Flask, jsonify
from config import config
from app.extensions import db, login_manager, init_extensions
from app.errors import CoreError
from app.models import User


def create_app(config_name='default'):
    """创建Flask应用实例"""
    app = Flask(__name__)

    # 加载配置
    app.config.from_object(config[config_name])

    # 确保必要的目录存在
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') and not app.testing:
        os.makedirs(os.path.join(app.config['STORAGE_DIR'], 'data'), exist_ok=True)

    # 初始化扩展
    init_extensions(app)

    # 注册user_loader
    @login_manager.user_loader
    def load_user(user_id):
        user = db.session.get(User, int(user_id))
        if user is None or not user.is_active:
            return None
        return user

    # 注册错误处理
    register_error_handlers(app)

    # 注册蓝图
    register_blueprints(app)

    return app


def register_error_handlers(app):
    """业务异常统一转换为JSON响应"""
    @app.errorhandler(CoreError)
    def handle_core_error(error):
        app.logger.info(f"[{error.code}] {error.message}")
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'success': False, 'code': 'NotFound', 'message': '接口不存在'}), 404


def register_blueprints(app):
    """注册所有蓝图"""
    # 延迟导入避免循环依赖
    from app.routes import main, auth, admin, course_mgmt, student, submission, grading, logs

    app.register_blueprint(main.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(admin.bp)
    app.register_blueprint(course_mgmt.bp)
    app.register_blueprint(student.bp)
    app.register_blueprint(submission.bp)
    app.register_blueprint(grading.bp)
    app.register_blueprint(logs.bp)
