"""数据模型包"""
from app.models.user import User, UserRole
from app.models.course import Major, Course, course_student, course_teacher
from app.models.task import TrainingTask
from app.models.check_in import CheckIn, CheckInStatus
from app.models.submission import Submission, SubmissionStatus
from app.models.evaluation import Evaluation, CommentTemplate, TemplateCategory
from app.models.operation_log import OperationLog

__all__ = [
    'User', 'UserRole',
    'Major', 'Course', 'course_student', 'course_teacher',
    'TrainingTask',
    'CheckIn', 'CheckInStatus',
    'Submission', 'SubmissionStatus',
    'Evaluation', 'CommentTemplate', 'TemplateCategory',
    'OperationLog',
]
