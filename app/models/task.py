"""实训任务模型"""
from app.extensions import db
from app.utils.helpers import utc_now, format_time


class TrainingTask(db.Model):
    """实训任务模型"""
    __tablename__ = 'training_task'

    id = db.Column(db.Integer, primary_key=True)
    task_number = db.Column(db.String(50), unique=True, nullable=False)  # 任务编号
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id', ondelete='CASCADE'), nullable=False)
    scheduled_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time)
    end_time = db.Column(db.Time)
    created_at = db.Column(db.DateTime, default=utc_now)

    # 关系
    course = db.relationship('Course', back_populates='tasks')
    check_ins = db.relationship('CheckIn', back_populates='task', cascade='all, delete-orphan')
    submissions = db.relationship('Submission', back_populates='task', cascade='all, delete-orphan')

    def window_closed(self, local_now):
        """任务时间窗口是否已结束（用于缺勤统计）"""
        today = local_now.date()
        if self.scheduled_date < today:
            return True
        if self.scheduled_date > today:
            return False
        if self.end_time is None:
            return False
        return local_now.time() > self.end_time

    def to_dict(self):
        return {
            'id': self.id,
            'task_number': self.task_number,
            'name': self.name,
            'description': self.description,
            'course_id': self.course_id,
            'course_name': self.course.name if self.course else None,
            'scheduled_date': self.scheduled_date.isoformat(),
            'start_time': format_time(self.start_time),
            'end_time': format_time(self.end_time),
        }

    def __repr__(self):
        return f'<TrainingTask {self.task_number} {self.name}>'
