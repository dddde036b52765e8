"""打卡记录模型"""
from app.extensions import db
from app.utils.helpers import utc_now, to_local_time


class CheckInStatus:
    """打卡状态"""
    ON_TIME = 'on_time'
    LATE = 'late'
    ABSENT = 'absent'  # 仅统计时派生，不写入数据库


class CheckIn(db.Model):
    """打卡记录：每个学生每个任务最多一条"""
    __tablename__ = 'check_in'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    task_id = db.Column(db.Integer, db.ForeignKey('training_task.id', ondelete='CASCADE'), nullable=False)
    check_in_time = db.Column(db.DateTime, nullable=False, default=utc_now, index=True)
    status = db.Column(db.String(20), nullable=False, default=CheckInStatus.ON_TIME)

    # 关系
    student = db.relationship('User', backref='check_ins')
    task = db.relationship('TrainingTask', back_populates='check_ins')

    __table_args__ = (
        db.UniqueConstraint('student_id', 'task_id', name='uq_check_in_student_task'),
    )

    def to_dict(self):
        local_time = to_local_time(self.check_in_time)
        return {
            'id': self.id,
            'student_id': self.student_id,
            'student_name': self.student.real_name if self.student else None,
            'task_id': self.task_id,
            'task_name': self.task.name if self.task else None,
            'check_in_time': local_time.isoformat() if local_time else None,
            'status': self.status,
        }

    def __repr__(self):
        return f'<CheckIn student={self.student_id} task={self.task_id} {self.status}>'
