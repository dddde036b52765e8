"""评价与评语模板模型"""
from app.extensions import db
from app.utils.helpers import utc_now, to_local_time


class Evaluation(db.Model):
    """教师评价：与提交一一对应"""
    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey('submission.id', ondelete='CASCADE'),
                              nullable=False, unique=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now, index=True)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    # 关系
    submission = db.relationship('Submission', back_populates='evaluation')
    teacher = db.relationship('User', backref='given_evaluations')

    __table_args__ = (
        db.CheckConstraint('score >= 0 AND score <= 100', name='ck_evaluation_score_range'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'submission_id': self.submission_id,
            'teacher_id': self.teacher_id,
            'teacher_name': self.teacher.real_name if self.teacher else None,
            'score': self.score,
            'comment': self.comment,
            'created_at': to_local_time(self.created_at).isoformat(),
        }

    def __repr__(self):
        return f'<Evaluation submission={self.submission_id} score={self.score}>'


class TemplateCategory:
    """评语分类"""
    EXCELLENT = 'excellent'
    GOOD = 'good'
    AVERAGE = 'average'
    NEEDS_IMPROVEMENT = 'needs_improvement'
    ENCOURAGEMENT = 'encouragement'

    LABELS = {
        EXCELLENT: '优秀',
        GOOD: '良好',
        AVERAGE: '一般',
        NEEDS_IMPROVEMENT: '需改进',
        ENCOURAGEMENT: '鼓励',
    }


class CommentTemplate(db.Model):
    """评语模板：系统模板对所有教师可见，教师模板仅本人可见"""
    __tablename__ = 'comment_template'

    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(30), nullable=False, default=TemplateCategory.GOOD)
    is_system = db.Column(db.Boolean, default=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'))
    created_at = db.Column(db.DateTime, default=utc_now)

    teacher = db.relationship('User', backref='comment_templates')

    def to_dict(self):
        return {
            'id': self.id,
            'content': self.content,
            'category': self.category,
            'category_label': TemplateCategory.LABELS.get(self.category, self.category),
            'is_system': bool(self.is_system),
            'teacher_id': self.teacher_id,
        }

    def __repr__(self):
        return f'<CommentTemplate {self.category}>'
