"""专业与课程相关模型"""
from app.extensions import db
from app.utils.helpers import utc_now

# 课程-学生关联表（选课）
course_student = db.Table('course_student',
    db.Column('course_id', db.Integer, db.ForeignKey('course.id', ondelete='CASCADE'), primary_key=True),
    db.Column('student_id', db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
    db.Column('created_at', db.DateTime, default=utc_now)
)

# 课程-教师关联表（任课）
course_teacher = db.Table('course_teacher',
    db.Column('course_id', db.Integer, db.ForeignKey('course.id', ondelete='CASCADE'), primary_key=True),
    db.Column('teacher_id', db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
    db.Column('created_at', db.DateTime, default=utc_now)
)


class Major(db.Model):
    """专业模型（课程所属的培养方案分组）"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utc_now)

    courses = db.relationship('Course', back_populates='major', cascade='all, delete-orphan')

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'description': self.description}

    def __repr__(self):
        return f'<Major {self.name}>'


class Course(db.Model):
    """实训课程模型"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    major_id = db.Column(db.Integer, db.ForeignKey('major.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)

    # 关系
    major = db.relationship('Major', back_populates='courses')
    tasks = db.relationship('TrainingTask', back_populates='course', cascade='all, delete-orphan')
    students = db.relationship('User', secondary=course_student, backref='enrolled_courses')
    teachers = db.relationship('User', secondary=course_teacher, backref='teaching_courses')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'major_id': self.major_id,
            'major_name': self.major.name if self.major else None,
        }

    def __repr__(self):
        return f'<Course {self.name}>'
