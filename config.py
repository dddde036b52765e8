"""应用配置"""
import os
from datetime import timedelta, timezone


class Config:
    """基础配置"""
    # 应用基础配置
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # 数据库配置
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    STORAGE_DIR = os.environ.get('STORAGE_DIR', os.path.join(BASE_DIR, 'storage'))

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(STORAGE_DIR, "data", "training.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'connect_args': {
            'timeout': 30,
            'check_same_thread': False,
        },
        'echo': False
    }

    # 时区配置（打卡迟到判断按本地时间）
    TIMEZONE = timezone(timedelta(hours=int(os.environ.get('TIMEZONE_OFFSET_HOURS', '8'))))

    # 实训成果配置
    MAX_ARTIFACTS = 5
    SCORE_MIN = 0
    SCORE_MAX = 100

    # 批量导入
    IMPORT_DEFAULT_PASSWORD = os.environ.get('IMPORT_DEFAULT_PASSWORD', '123456')

    # 分页配置
    PER_PAGE_OPTIONS = [10, 20, 50, 100]
    DEFAULT_PER_PAGE = 10


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    TESTING = False

    def __init__(self):
        # 生产环境必须设置SECRET_KEY
        if Config.SECRET_KEY == 'dev-secret-key-change-in-production':
            import warnings
            warnings.warn(
                '警告：生产环境下使用默认SECRET_KEY是不安全的！'
                '请通过环境变量SECRET_KEY设置安全密钥。',
                UserWarning
            )


class TestingConfig(Config):
    """测试环境配置"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}


# 配置字典
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
