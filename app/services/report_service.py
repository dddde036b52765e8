"""统计报表服务：只读，按需从打卡、提交、评价数据计算"""
import math
from dataclasses import dataclass, field, asdict

import pandas as pd
from sqlalchemy import func, select

from app.extensions import db
from app.models import (
    CheckIn, CheckInStatus, Course, Submission, SubmissionStatus, Evaluation, TrainingTask, UserRole
)
from app.errors import ValidationError
from app.services.registry_service import RegistryService
from app.services.task_service import TaskService
from app.utils.helpers import local_now, local_date_range_to_utc, to_local_time


def percent(numerator, denominator):
    """百分比：四舍五入取整并限制在[0,100]，分母为0时返回0"""
    if not denominator or denominator <= 0:
        return 0
    value = math.floor(numerator * 100 / denominator + 0.5)
    return max(0, min(100, value))


@dataclass
class WindowReport:
    """时间窗口统计结果"""
    start: str
    end: str
    task_count: int = 0
    student_count: int = 0
    expected_check_ins: int = 0
    check_ins: int = 0
    on_time: int = 0
    late: int = 0
    absent: int = 0
    submissions: int = 0
    pending_submissions: int = 0
    evaluated_submissions: int = 0
    evaluations: int = 0
    average_score: int = 0
    check_in_rate: int = 0
    submission_rate: int = 0
    evaluation_rate: int = 0
    daily: list = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


class ReportService:
    """统计报表服务类"""

    @staticmethod
    def _scope(principal):
        """报表范围：管理员为全部课程，教师为任课课程"""
        if principal is None:
            return None
        principal.require_role(UserRole.ADMIN, UserRole.TEACHER)
        return RegistryService.courses_visible_to(principal)

    @staticmethod
    def report_window(start, end, principal=None, now=None):
        """计算[start, end]（本地日期，含两端）内的各项比率

        打卡率 = 打卡数 / (任务数 × 选课学生数)，该分母是估算值，因此所有比率都限制在100以内。
        """
        if start is None or end is None:
            raise ValidationError('请指定统计起止日期')
        if end < start:
            raise ValidationError('结束日期不能早于开始日期')

        course_ids = ReportService._scope(principal)
        if course_ids is None:
            course_ids = set(db.session.execute(select(Course.id)).scalars().all())

        report = WindowReport(start=start.isoformat(), end=end.isoformat())
        utc_start, utc_end = local_date_range_to_utc(start, end)

        tasks = TaskService.tasks_for(course_ids, start, end, ascending=True)
        report.task_count = len(tasks)
        report.student_count = RegistryService.enrolled_student_count(course_ids)
        report.expected_check_ins = report.task_count * report.student_count

        check_ins = []
        submissions = []
        evaluations = []
        if course_ids:
            check_ins = CheckIn.query.join(TrainingTask, CheckIn.task_id == TrainingTask.id).filter(
                TrainingTask.course_id.in_(course_ids),
                CheckIn.check_in_time >= utc_start,
                CheckIn.check_in_time < utc_end
            ).all()
            submissions = Submission.query.join(TrainingTask, Submission.task_id == TrainingTask.id).filter(
                TrainingTask.course_id.in_(course_ids),
                Submission.submitted_at >= utc_start,
                Submission.submitted_at < utc_end
            ).all()
            evaluations = Evaluation.query.join(Submission, Evaluation.submission_id == Submission.id) \
                .join(TrainingTask, Submission.task_id == TrainingTask.id).filter(
                    TrainingTask.course_id.in_(course_ids),
                    Evaluation.created_at >= utc_start,
                    Evaluation.created_at < utc_end
                ).all()

        report.check_ins = len(check_ins)
        report.on_time = sum(1 for c in check_ins if c.status == CheckInStatus.ON_TIME)
        report.late = sum(1 for c in check_ins if c.status == CheckInStatus.LATE)
        report.absent = ReportService.count_absent(tasks, now=now)

        report.submissions = len(submissions)
        report.pending_submissions = sum(1 for s in submissions if s.status == SubmissionStatus.PENDING)
        report.evaluated_submissions = sum(1 for s in submissions if s.status == SubmissionStatus.EVALUATED)
        report.evaluations = len(evaluations)
        if evaluations:
            report.average_score = math.floor(sum(e.score for e in evaluations) / len(evaluations) + 0.5)

        report.check_in_rate = percent(report.check_ins, report.expected_check_ins)
        report.submission_rate = percent(report.submissions, report.check_ins)
        report.evaluation_rate = percent(report.evaluated_submissions, report.submissions)

        report.daily = ReportService.daily_breakdown(
            start, end,
            check_in_times=[c.check_in_time for c in check_ins],
            submission_times=[s.submitted_at for s in submissions],
            evaluation_times=[e.created_at for e in evaluations]
        )
        return report

    @staticmethod
    def count_absent(tasks, now=None):
        """缺勤数：时间窗口已结束的任务中，选课学生没有打卡记录的人次"""
        current = local_now(now)
        closed = [t for t in tasks if t.window_closed(current)]
        if not closed:
            return 0

        roster = RegistryService.roster_by_course({t.course_id for t in closed})
        checked = set(db.session.query(CheckIn.student_id, CheckIn.task_id).filter(
            CheckIn.task_id.in_([t.id for t in closed])
        ).all())

        absent = 0
        for task in closed:
            for student_id in roster.get(task.course_id, ()):
                if (student_id, task.id) not in checked:
                    absent += 1
        return absent

    @staticmethod
    def daily_breakdown(start, end, check_in_times, submission_times, evaluation_times):
        """按天统计打卡、提交、评价数量"""
        days = pd.date_range(start, end, freq='D').date

        def _counts(timestamps):
            if not timestamps:
                return pd.Series(0, index=days)
            local_days = pd.Series([to_local_time(t).date() for t in timestamps])
            return local_days.value_counts().reindex(days, fill_value=0)

        frame = pd.DataFrame({
            'check_ins': _counts(check_in_times),
            'submissions': _counts(submission_times),
            'evaluations': _counts(evaluation_times),
        }, index=days)

        return [
            {'date': day.isoformat(), **{column: int(value) for column, value in row.items()}}
            for day, row in frame.iterrows()
        ]

    @staticmethod
    def score_statistics(principal=None):
        """评分统计：平均分、最高分、最低分"""
        query = db.session.query(
            func.count(Evaluation.id), func.avg(Evaluation.score),
            func.max(Evaluation.score), func.min(Evaluation.score)
        ).join(Submission, Evaluation.submission_id == Submission.id) \
            .join(TrainingTask, Submission.task_id == TrainingTask.id)

        scope = ReportService._scope(principal)
        if scope is not None:
            if not scope:
                return {'count': 0, 'average': 0, 'max': None, 'min': None}
            query = query.filter(TrainingTask.course_id.in_(scope))

        count, average, highest, lowest = query.one()
        return {
            'count': count or 0,
            'average': math.floor(float(average) + 0.5) if average is not None else 0,
            'max': highest,
            'min': lowest,
        }
