"""用户相关模型"""
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from app.extensions import db
from app.utils.helpers import utc_now


class UserRole:
    """用户角色枚举"""
    ADMIN = 'admin'
    TEACHER = 'teacher'
    STUDENT = 'student'

    ALL = (ADMIN, TEACHER, STUDENT)


class User(UserMixin, db.Model):
    """用户模型"""
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    real_name = db.Column(db.String(100), nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=UserRole.STUDENT)
    student_number = db.Column(db.String(50), unique=True)  # 学号（学生专用）
    employee_number = db.Column(db.String(50), unique=True)  # 工号（教师/管理员专用）
    phone = db.Column(db.String(20))
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utc_now)

    def set_password(self, password):
        """设置密码"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """验证密码"""
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    @property
    def is_teacher(self):
        return self.role == UserRole.TEACHER

    @property
    def is_student(self):
        return self.role == UserRole.STUDENT

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'real_name': self.real_name,
            'role': self.role,
            'student_number': self.student_number,
            'employee_number': self.employee_number,
        }

    def __repr__(self):
        return f'<User {self.real_name}>'
