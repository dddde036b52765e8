"""成果评价服务"""
from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import Evaluation, Submission, SubmissionStatus, TrainingTask, UserRole
from app.errors import (
    CoreError, ScoreOutOfRange, NotAssigned, NotAuthor, AlreadyEvaluated,
    SubmissionLocked, SubmissionNotFound, EvaluationNotFound
)
from app.services.registry_service import RegistryService
from app.utils.helpers import utc_now


@dataclass
class BatchItemResult:
    """批量评价中单条提交的结果"""
    submission_id: int
    evaluation: Optional[Evaluation] = None
    error: Optional[CoreError] = None

    @property
    def ok(self):
        return self.error is None

    def to_dict(self):
        if self.ok:
            return {'submission_id': self.submission_id, 'success': True,
                    'evaluation_id': self.evaluation.id}
        return {'submission_id': self.submission_id, 'success': False,
                'code': self.error.code, 'message': self.error.message}


class EvaluationService:
    """成果评价服务类"""

    @staticmethod
    def validate_score(score):
        """校验分数为[0,100]内的整数"""
        if isinstance(score, bool):
            raise ScoreOutOfRange('评分必须是整数')
        if isinstance(score, float) and score.is_integer():
            score = int(score)
        elif isinstance(score, str):
            try:
                score = int(score.strip())
            except ValueError:
                raise ScoreOutOfRange('评分必须是整数')
        if not isinstance(score, int):
            raise ScoreOutOfRange('评分必须是整数')

        low = current_app.config.get('SCORE_MIN', 0)
        high = current_app.config.get('SCORE_MAX', 100)
        if score < low or score > high:
            raise ScoreOutOfRange(f'评分必须在{low}-{high}之间', score=score)
        return score

    @staticmethod
    def evaluate(teacher, submission_id, score, comment=None, now=None):
        """教师评价一条提交

        写入评价记录并把提交状态从待评价改为已评价，两步在同一事务中完成，任一步失败整体回滚。
        """
        teacher.require_role(UserRole.TEACHER)
        submission = db.session.get(Submission, submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)

        # 先检查任课关系：非任课教师无论分数是否合法都返回NotAssigned
        RegistryService.require_course(teacher, submission.task.course_id, NotAssigned)
        score = EvaluationService.validate_score(score)

        if submission.evaluation is not None:
            raise AlreadyEvaluated(submission_id=submission.id)
        if submission.status != SubmissionStatus.PENDING:
            raise SubmissionLocked(submission_id=submission.id)

        comment = (comment or '').strip() or None
        evaluation = Evaluation(
            submission_id=submission.id,
            teacher_id=teacher.principal_id,
            score=score,
            comment=comment,
            created_at=now if now is not None else utc_now()
        )
        try:
            db.session.add(evaluation)
            db.session.flush()

            updated = Submission.query.filter_by(
                id=submission.id, status=SubmissionStatus.PENDING
            ).update({'status': SubmissionStatus.EVALUATED}, synchronize_session=False)
            if updated != 1:
                raise AlreadyEvaluated(submission_id=submission.id)

            db.session.commit()
        except IntegrityError:
            # 唯一索引：并发评价时后到者失败
            db.session.rollback()
            raise AlreadyEvaluated(submission_id=submission.id)
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f"[EVALUATE] 教师ID={teacher.principal_id} 提交ID={submission.id} 分数={score}")
        return evaluation

    @staticmethod
    def evaluate_batch(teacher, submission_ids, score, comment=None, now=None):
        """批量评价：每条提交独立事务，单条失败不影响其他提交

        Returns:
            与submission_ids顺序一致的BatchItemResult列表
        """
        results = []
        for submission_id in submission_ids:
            try:
                evaluation = EvaluationService.evaluate(teacher, submission_id, score, comment, now=now)
                results.append(BatchItemResult(submission_id=submission_id, evaluation=evaluation))
            except CoreError as e:
                results.append(BatchItemResult(submission_id=submission_id, error=e))

        succeeded = sum(1 for r in results if r.ok)
        current_app.logger.info(
            f"[EVALUATE_BATCH] 教师ID={teacher.principal_id} 成功{succeeded}/{len(results)}")
        return results

    @staticmethod
    def summarize(results):
        """批量结果汇总"""
        succeeded = sum(1 for r in results if r.ok)
        return {'total': len(results), 'succeeded': succeeded, 'failed': len(results) - succeeded}

    @staticmethod
    def update_evaluation(teacher, evaluation_id, score=None, comment=None):
        """教师修改自己的评价（不改变提交状态）"""
        evaluation = db.session.get(Evaluation, evaluation_id)
        if evaluation is None:
            raise EvaluationNotFound(evaluation_id)
        if evaluation.teacher_id != teacher.principal_id:
            raise NotAuthor()

        if score is not None:
            evaluation.score = EvaluationService.validate_score(score)
        if comment is not None:
            evaluation.comment = comment.strip() or None
        evaluation.updated_at = utc_now()
        db.session.commit()

        current_app.logger.info(f"[EVALUATE] 教师ID={teacher.principal_id} 修改评价ID={evaluation.id}")
        return evaluation

    @staticmethod
    def evaluations_visible_to(principal):
        """调用方可见的评价（学生只读自己提交的评价）"""
        query = Evaluation.query.join(Submission, Evaluation.submission_id == Submission.id) \
            .join(TrainingTask, Submission.task_id == TrainingTask.id)
        if principal.is_student:
            query = query.filter(Submission.student_id == principal.principal_id)
        elif not principal.is_admin:
            course_ids = RegistryService.courses_visible_to(principal)
            if not course_ids:
                return []
            query = query.filter(TrainingTask.course_id.in_(course_ids))
        return query.order_by(Evaluation.created_at.desc(), Evaluation.id.desc()).all()
