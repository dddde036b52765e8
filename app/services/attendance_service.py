"""打卡服务"""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import CheckIn, CheckInStatus, TrainingTask, UserRole
from app.errors import DuplicateCheckIn, NotEnrolled, CheckInNotOpen
from app.services.registry_service import RegistryService
from app.services.task_service import TaskService
from app.utils.helpers import utc_now, local_now, local_date_range_to_utc


class AttendanceService:
    """打卡服务类"""

    @staticmethod
    def compute_status(task, local_dt):
        """根据任务开始时间判断打卡状态

        未设置开始时间一律视为正常；本地时间不晚于打卡当天的开始时间为正常，否则为迟到。
        """
        if task.start_time is None:
            return CheckInStatus.ON_TIME
        local_dt = local_dt.replace(tzinfo=None)
        if local_dt <= datetime.combine(local_dt.date(), task.start_time):
            return CheckInStatus.ON_TIME
        return CheckInStatus.LATE

    @staticmethod
    def record_check_in(student, task_id, now=None):
        """学生打卡

        Args:
            student: 学生Principal
            task_id: 任务ID
            now: 当前UTC时间（naive），默认取系统时间
        """
        student.require_role(UserRole.STUDENT)
        task = TaskService.get_task(task_id)
        RegistryService.require_course(student, task.course_id, NotEnrolled)

        now = now if now is not None else utc_now()
        local_dt = local_now(now)
        if local_dt.date() < task.scheduled_date:
            raise CheckInNotOpen(f'任务计划于{task.scheduled_date.isoformat()}进行，暂不能打卡')

        existing = CheckIn.query.filter_by(student_id=student.principal_id, task_id=task.id).first()
        if existing is not None:
            raise DuplicateCheckIn()

        check_in = CheckIn(
            student_id=student.principal_id,
            task_id=task.id,
            check_in_time=now,
            status=AttendanceService.compute_status(task, local_dt)
        )
        db.session.add(check_in)
        try:
            db.session.commit()
        except IntegrityError:
            # 并发请求：唯一索引保证先到者成功
            db.session.rollback()
            raise DuplicateCheckIn()

        current_app.logger.info(
            f"[CHECKIN] 学生ID={student.principal_id} 任务={task.task_number} 状态={check_in.status}")
        return check_in

    @staticmethod
    def check_ins_visible_to(principal, task_id=None, date_from=None, date_to=None, limit=None):
        """调用方可见的打卡记录（按打卡时间倒序）

        学生只看自己的记录，教师看任课课程的记录，管理员看全部。
        """
        query = CheckIn.query.join(TrainingTask, CheckIn.task_id == TrainingTask.id)
        if principal.is_student:
            query = query.filter(CheckIn.student_id == principal.principal_id)
        elif not principal.is_admin:
            course_ids = RegistryService.courses_visible_to(principal)
            if not course_ids:
                return []
            query = query.filter(TrainingTask.course_id.in_(course_ids))

        if task_id is not None:
            query = query.filter(CheckIn.task_id == task_id)
        if date_from is not None:
            start, _ = local_date_range_to_utc(date_from, date_from)
            query = query.filter(CheckIn.check_in_time >= start)
        if date_to is not None:
            _, end = local_date_range_to_utc(date_to, date_to)
            query = query.filter(CheckIn.check_in_time < end)

        query = query.order_by(CheckIn.check_in_time.desc(), CheckIn.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def checked_in_task_ids(student_id, task_ids):
        """已打卡的任务ID集合"""
        if not task_ids:
            return set()
        rows = db.session.query(CheckIn.task_id).filter(
            CheckIn.student_id == student_id,
            CheckIn.task_id.in_(task_ids)
        ).all()
        return {row[0] for row in rows}

    @staticmethod
    def attendance_summary(check_ins):
        """按状态统计打卡记录"""
        summary = {'total': len(check_ins), CheckInStatus.ON_TIME: 0, CheckInStatus.LATE: 0,
                   CheckInStatus.ABSENT: 0}
        for record in check_ins:
            summary[record.status] = summary.get(record.status, 0) + 1
        return summary
