"""实训任务服务"""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import TrainingTask, Course, UserRole
from app.errors import (
    MissingField, InvalidTimeWindow, DuplicateTaskNumber,
    TaskNotFound, CourseNotFound, ValidationError
)
from app.services.registry_service import RegistryService
from app.utils.helpers import local_now, parse_date, parse_time


class TaskService:
    """实训任务服务类"""

    EDITABLE_FIELDS = ('name', 'task_number', 'description', 'course_id',
                       'scheduled_date', 'start_time', 'end_time')

    @staticmethod
    def tasks_for(course_ids, date_from=None, date_to=None, ascending=False):
        """获取指定课程的任务，默认按计划日期倒序"""
        if not course_ids:
            return []
        query = TrainingTask.query.filter(TrainingTask.course_id.in_(course_ids))
        if date_from is not None:
            query = query.filter(TrainingTask.scheduled_date >= date_from)
        if date_to is not None:
            query = query.filter(TrainingTask.scheduled_date <= date_to)
        if ascending:
            query = query.order_by(TrainingTask.scheduled_date.asc(),
                                   TrainingTask.start_time.asc(), TrainingTask.id.asc())
        else:
            query = query.order_by(TrainingTask.scheduled_date.desc(),
                                   TrainingTask.start_time.desc(), TrainingTask.id.desc())
        return query.all()

    @staticmethod
    def tasks_visible_to(principal, date_from=None, date_to=None, ascending=False):
        """调用方可见的任务"""
        course_ids = RegistryService.courses_visible_to(principal)
        return TaskService.tasks_for(course_ids, date_from, date_to, ascending)

    @staticmethod
    def today_tasks(principal, now=None):
        """今日任务（按开始时间升序）"""
        today = local_now(now).date()
        return TaskService.tasks_visible_to(principal, date_from=today, date_to=today, ascending=True)

    @staticmethod
    def get_task(task_id):
        task = db.session.get(TrainingTask, task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task

    @staticmethod
    def _apply_fields(task, data):
        """校验并写入任务字段"""
        for field in TaskService.EDITABLE_FIELDS:
            if field not in data:
                continue
            value = data[field]
            if field in ('name', 'task_number'):
                value = (value or '').strip()
            elif field == 'description':
                value = (value or '').strip() or None
            elif field == 'scheduled_date':
                try:
                    value = parse_date(value)
                except ValueError:
                    raise ValidationError('计划日期格式应为YYYY-MM-DD')
            elif field in ('start_time', 'end_time'):
                try:
                    value = parse_time(value)
                except ValueError:
                    raise ValidationError('时间格式应为HH:MM')
            elif field == 'course_id':
                if value is None:
                    raise CourseNotFound(value)
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    raise ValidationError('课程ID格式不正确', field='course_id')
                if db.session.get(Course, value) is None:
                    raise CourseNotFound(value)
            setattr(task, field, value)

        for field, label in (('name', '任务名称'), ('task_number', '任务编号'),
                             ('scheduled_date', '计划日期'), ('course_id', '所属课程')):
            if not getattr(task, field):
                raise MissingField(f'{label}不能为空', field=field)

        if task.start_time and task.end_time and task.end_time < task.start_time:
            raise InvalidTimeWindow()

    @staticmethod
    def _commit(task):
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateTaskNumber(f'任务编号「{task.task_number}」已存在')
        return task

    @staticmethod
    def create_task(admin, data):
        """创建任务"""
        admin.require_role(UserRole.ADMIN)
        task = TrainingTask()
        TaskService._apply_fields(task, data)
        db.session.add(task)
        TaskService._commit(task)
        current_app.logger.info(f"[TASK] 创建任务 {task.task_number} 课程ID={task.course_id}")
        return task

    @staticmethod
    def update_task(admin, task_id, data):
        """编辑任务"""
        admin.require_role(UserRole.ADMIN)
        task = TaskService.get_task(task_id)
        try:
            TaskService._apply_fields(task, data)
        except Exception:
            db.session.rollback()
            raise
        return TaskService._commit(task)

    @staticmethod
    def delete_task(admin, task_id):
        """删除任务（级联删除打卡、提交、评价）"""
        admin.require_role(UserRole.ADMIN)
        task = TaskService.get_task(task_id)
        db.session.delete(task)
        db.session.commit()
        current_app.logger.info(f"[TASK] 删除任务ID={task_id}")
