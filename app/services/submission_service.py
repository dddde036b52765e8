"""实训成果提交服务"""
from flask import current_app
from sqlalchemy import or_, func

from app.extensions import db
from app.models import Submission, SubmissionStatus, TrainingTask, User, UserRole
from app.errors import (
    EmptySubmission, TooManyArtifacts, InvalidArtifactUrl, NotEnrolled, NotOwner,
    SubmissionLocked, SubmissionNotFound, PendingSubmissionExists, AuthorizationError
)
from app.services.registry_service import RegistryService
from app.services.task_service import TaskService
from app.utils.helpers import utc_now, is_valid_url


class SubmissionService:
    """实训成果提交服务类"""

    @staticmethod
    def normalize_payload(content, artifact_urls):
        """校验并规范化提交内容，返回(content, urls)

        文字描述去除首尾空白；附件最多MAX_ARTIFACTS个且必须为合法URL；两者至少提供一项。
        """
        content = (content or '').strip() or None
        if isinstance(artifact_urls, str):
            artifact_urls = [artifact_urls]
        urls = []
        for url in artifact_urls or []:
            if not isinstance(url, str):
                raise InvalidArtifactUrl()
            if url.strip():
                urls.append(url.strip())

        max_artifacts = current_app.config.get('MAX_ARTIFACTS', 5)
        if len(urls) > max_artifacts:
            raise TooManyArtifacts(f'最多上传{max_artifacts}个附件', count=len(urls))
        for url in urls:
            if not is_valid_url(url):
                raise InvalidArtifactUrl(f'附件地址不合法：{url}')

        if content is None and not urls:
            raise EmptySubmission()
        return content, urls

    @staticmethod
    def submit(student, task_id, content=None, artifact_urls=None, now=None):
        """学生提交实训成果，新提交状态为待评价"""
        student.require_role(UserRole.STUDENT)
        task = TaskService.get_task(task_id)
        RegistryService.require_course(student, task.course_id, NotEnrolled)
        content, urls = SubmissionService.normalize_payload(content, artifact_urls)

        pending = Submission.query.filter_by(
            student_id=student.principal_id,
            task_id=task.id,
            status=SubmissionStatus.PENDING
        ).first()
        if pending is not None:
            raise PendingSubmissionExists(submission_id=pending.id)

        submission = Submission(
            student_id=student.principal_id,
            task_id=task.id,
            content=content,
            artifact_urls=urls,
            status=SubmissionStatus.PENDING,
            submitted_at=now if now is not None else utc_now()
        )
        db.session.add(submission)
        db.session.commit()

        current_app.logger.info(
            f"[SUBMIT] 学生ID={student.principal_id} 任务={task.task_number} 附件数={len(urls)}")
        return submission

    @staticmethod
    def amend(student, submission_id, content=None, artifact_urls=None):
        """修改待评价的提交

        未传入的字段（None）保留原值，合并后的内容仍需满足非空要求。
        """
        submission = db.session.get(Submission, submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)
        if submission.student_id != student.principal_id:
            raise NotOwner()
        if not submission.is_pending:
            raise SubmissionLocked()

        if content is None:
            content = submission.content
        if artifact_urls is None:
            artifact_urls = submission.artifact_urls
        content, urls = SubmissionService.normalize_payload(content, artifact_urls)

        # 仅在仍为待评价时更新，避免与评价并发时覆盖已评价的提交
        updated = Submission.query.filter_by(
            id=submission.id, status=SubmissionStatus.PENDING
        ).update({
            'content': content,
            'artifact_urls': urls,
            'updated_at': utc_now(),
        }, synchronize_session=False)
        if updated != 1:
            db.session.rollback()
            raise SubmissionLocked()
        db.session.commit()
        db.session.refresh(submission)

        current_app.logger.info(f"[AMEND] 学生ID={student.principal_id} 提交ID={submission.id}")
        return submission

    @staticmethod
    def _visible_query(principal):
        query = Submission.query.join(TrainingTask, Submission.task_id == TrainingTask.id)
        if principal.is_student:
            return query.filter(Submission.student_id == principal.principal_id)
        if principal.is_admin:
            return query
        course_ids = RegistryService.courses_visible_to(principal)
        if not course_ids:
            return None
        return query.filter(TrainingTask.course_id.in_(course_ids))

    @staticmethod
    def submissions_visible_to(principal, status=None, course_id=None, task_id=None, search=None):
        """调用方可见的提交记录

        学生只看自己的，教师看任课课程的，管理员看全部。search按学生姓名或任务名称模糊匹配（不区分大小写）。
        """
        query = SubmissionService._visible_query(principal)
        if query is None:
            return []

        if status:
            query = query.filter(Submission.status == status)
        if course_id is not None:
            query = query.filter(TrainingTask.course_id == course_id)
        if task_id is not None:
            query = query.filter(Submission.task_id == task_id)
        if search and search.strip():
            pattern = f'%{search.strip().lower()}%'
            query = query.join(User, Submission.student_id == User.id).filter(or_(
                func.lower(User.real_name).like(pattern),
                func.lower(TrainingTask.name).like(pattern)
            ))

        return query.order_by(Submission.submitted_at.desc(), Submission.id.desc()).all()

    @staticmethod
    def get_submission(principal, submission_id):
        """获取单条提交（带可见性检查）"""
        submission = db.session.get(Submission, submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)
        if principal.is_student:
            if submission.student_id != principal.principal_id:
                raise NotOwner()
        elif not principal.is_admin:
            RegistryService.require_course(principal, submission.task.course_id, AuthorizationError)
        return submission

    @staticmethod
    def submitted_task_ids(student_id, task_ids=None):
        """学生已提交过的任务ID集合"""
        query = db.session.query(Submission.task_id).filter(Submission.student_id == student_id)
        if task_ids is not None:
            query = query.filter(Submission.task_id.in_(task_ids))
        return {row[0] for row in query.distinct().all()}
