#!/usr/bin/env python3
"""
数据库初始化脚本
用于创建数据库表、默认管理员用户和系统评语模板
"""

import os

from app import create_app
from app.extensions import db
from app.models import User, UserRole
from app.services.template_service import TemplateService


def init_database(config_name=None):
    """初始化数据库"""
    app = create_app(config_name or os.getenv('FLASK_ENV', 'production'))
    with app.app_context():
        # 创建所有表
        db.create_all()
        print("数据库表创建完成")

        # 创建默认管理员用户
        admin_username = os.environ.get('ADMIN_USERNAME', 'admin')
        admin_password = os.environ.get('ADMIN_PASSWORD', 'admin123')

        # 检查管理员是否已存在
        existing_admin = User.query.filter_by(username=admin_username).first()
        if not existing_admin:
            admin = User(username=admin_username, real_name='系统管理员', role=UserRole.ADMIN)
            admin.set_password(admin_password)
            db.session.add(admin)
            db.session.commit()
            print(f"创建默认管理员用户: {admin_username}")
        else:
            print(f"管理员用户 {admin_username} 已存在")

        created = TemplateService.ensure_system_templates()
        print(f"系统评语模板：新增{created}条")


if __name__ == '__main__':
    init_database()
