"""实训成果提交模型"""
from app.extensions import db
from app.utils.helpers import utc_now, to_local_time


class SubmissionStatus:
    """提交状态"""
    PENDING = 'pending'
    EVALUATED = 'evaluated'
    REJECTED = 'rejected'


class Submission(db.Model):
    """实训成果提交模型"""
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    task_id = db.Column(db.Integer, db.ForeignKey('training_task.id', ondelete='CASCADE'), nullable=False)
    content = db.Column(db.Text)  # 文字描述
    artifact_urls = db.Column(db.JSON, nullable=False, default=list)  # 文件URL列表
    status = db.Column(db.String(20), nullable=False, default=SubmissionStatus.PENDING, index=True)
    submitted_at = db.Column(db.DateTime, nullable=False, default=utc_now, index=True)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    # 关系
    student = db.relationship('User', backref='submissions')
    task = db.relationship('TrainingTask', back_populates='submissions')
    evaluation = db.relationship('Evaluation', back_populates='submission', uselist=False,
                                 cascade='all, delete-orphan')

    @property
    def is_pending(self):
        return self.status == SubmissionStatus.PENDING

    def to_dict(self, include_evaluation=True):
        data = {
            'id': self.id,
            'student_id': self.student_id,
            'student_name': self.student.real_name if self.student else None,
            'task_id': self.task_id,
            'task_name': self.task.name if self.task else None,
            'course_id': self.task.course_id if self.task else None,
            'content': self.content,
            'artifact_urls': list(self.artifact_urls or []),
            'status': self.status,
            'submitted_at': to_local_time(self.submitted_at).isoformat(),
        }
        if include_evaluation:
            data['evaluation'] = self.evaluation.to_dict() if self.evaluation else None
        return data

    def __repr__(self):
        return f'<Submission {self.id} student={self.student_id} task={self.task_id} {self.status}>'
