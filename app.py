"""实训打卡与成果评价系统 - 应用入口

使用说明:
- 直接运行: python app.py
- Gunicorn运行: gunicorn app:app
"""
import os
from app import create_app

# 创建应用实例
config_name = os.getenv('FLASK_ENV', 'production')
app = create_app(config_name)

if __name__ == '__main__':
    # 仅用于开发测试
    app.run(host='0.0.0.0', port=5000, debug=True)
