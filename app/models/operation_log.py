"""操作日志模型"""
from app.extensions import db
from app.utils.helpers import utc_now, to_local_time


class OperationLog(db.Model):
    """操作日志表"""
    __tablename__ = 'operation_log'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True)  # 可能是未登录用户
    username = db.Column(db.String(80))  # 冗余存储，方便查询
    user_role = db.Column(db.String(20))  # 用户角色

    operation_type = db.Column(db.String(50), nullable=False)  # 操作类型：check_in, submit, evaluate等
    operation_desc = db.Column(db.String(500))  # 操作描述

    ip_address = db.Column(db.String(50))  # IP地址
    user_agent = db.Column(db.String(500))  # 浏览器信息

    request_method = db.Column(db.String(10))  # GET, POST等
    request_path = db.Column(db.String(500))  # 请求路径

    result = db.Column(db.String(20))  # success, failed
    error_msg = db.Column(db.Text)  # 错误信息

    created_at = db.Column(db.DateTime, default=utc_now, nullable=False, index=True)

    # 关联用户
    user = db.relationship('User', backref='operation_logs')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'username': self.username,
            'user_role': self.user_role,
            'operation_type': self.operation_type,
            'operation_desc': self.operation_desc,
            'ip_address': self.ip_address,
            'request_method': self.request_method,
            'request_path': self.request_path,
            'result': self.result,
            'error_msg': self.error_msg,
            'created_at': to_local_time(self.created_at).isoformat(),
        }

    def __repr__(self):
        return f'<OperationLog {self.id}: {self.username} - {self.operation_type}>'
