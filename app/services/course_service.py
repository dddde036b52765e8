"""专业与课程管理服务"""
from flask import current_app
from sqlalchemy import delete, select, func
from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import (
    Major, Course, TrainingTask, CheckIn, Submission, Evaluation,
    course_student, course_teacher, UserRole
)
from app.errors import MissingField, DuplicateName, MajorNotFound, CourseNotFound


class CourseService:
    """专业与课程管理服务类（仅管理员）"""

    @staticmethod
    def list_majors():
        return Major.query.order_by(Major.name.asc()).all()

    @staticmethod
    def list_courses(major_id=None):
        query = Course.query
        if major_id is not None:
            query = query.filter_by(major_id=major_id)
        return query.order_by(Course.created_at.desc(), Course.id.desc()).all()

    @staticmethod
    def create_major(admin, name, description=None):
        """创建专业"""
        admin.require_role(UserRole.ADMIN)
        name = (name or '').strip()
        if not name:
            raise MissingField('专业名称不能为空', field='name')
        major = Major(name=name, description=(description or '').strip() or None)
        db.session.add(major)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateName(f'专业「{name}」已存在')
        return major

    @staticmethod
    def delete_major(admin, major_id):
        """删除专业及其下所有课程"""
        admin.require_role(UserRole.ADMIN)
        major = db.session.get(Major, major_id)
        if major is None:
            raise MajorNotFound(major_id)
        totals = {}
        for course_id in [c.id for c in major.courses]:
            for key, value in CourseService.delete_course(admin, course_id).items():
                totals[key] = totals.get(key, 0) + value
        db.session.delete(major)
        db.session.commit()
        return totals

    @staticmethod
    def create_course(admin, name, major_id, description=None):
        """创建课程"""
        admin.require_role(UserRole.ADMIN)
        name = (name or '').strip()
        if not name:
            raise MissingField('课程名称不能为空', field='name')
        if major_id is None or db.session.get(Major, major_id) is None:
            raise MajorNotFound(major_id)
        course = Course(name=name, major_id=major_id, description=(description or '').strip() or None)
        db.session.add(course)
        db.session.commit()
        current_app.logger.info(f"[COURSE] 创建课程 {name} 专业ID={major_id}")
        return course

    @staticmethod
    def update_course(admin, course_id, name=None, description=None):
        """编辑课程名称和描述"""
        admin.require_role(UserRole.ADMIN)
        course = db.session.get(Course, course_id)
        if course is None:
            raise CourseNotFound(course_id)
        if name is not None:
            name = name.strip()
            if not name:
                raise MissingField('课程名称不能为空', field='name')
            course.name = name
        if description is not None:
            course.description = description.strip() or None
        db.session.commit()
        return course

    @staticmethod
    def delete_course(admin, course_id):
        """删除课程，级联删除任务、打卡、提交、评价以及选课/任课关系

        级联顺序由本方法显式完成，不依赖数据库外键设置。

        Returns:
            各表删除的行数
        """
        admin.require_role(UserRole.ADMIN)
        course = db.session.get(Course, course_id)
        if course is None:
            raise CourseNotFound(course_id)

        task_ids = select(TrainingTask.id).where(TrainingTask.course_id == course_id)
        submission_ids = select(Submission.id).where(Submission.task_id.in_(task_ids))

        def _count(stmt):
            return db.session.execute(select(func.count()).select_from(stmt.subquery())).scalar()

        removed = {
            'evaluations': _count(select(Evaluation.id).where(Evaluation.submission_id.in_(submission_ids))),
            'submissions': _count(submission_ids),
            'check_ins': _count(select(CheckIn.id).where(CheckIn.task_id.in_(task_ids))),
            'tasks': _count(task_ids),
        }

        try:
            db.session.execute(delete(Evaluation).where(Evaluation.submission_id.in_(submission_ids)))
            db.session.execute(delete(Submission).where(Submission.task_id.in_(task_ids)))
            db.session.execute(delete(CheckIn).where(CheckIn.task_id.in_(task_ids)))
            db.session.execute(delete(TrainingTask).where(TrainingTask.course_id == course_id))
            removed['enrollments'] = db.session.execute(
                delete(course_student).where(course_student.c.course_id == course_id)).rowcount
            removed['assignments'] = db.session.execute(
                delete(course_teacher).where(course_teacher.c.course_id == course_id)).rowcount
            db.session.execute(delete(Course).where(Course.id == course_id))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        db.session.expire_all()
        current_app.logger.info(f"[COURSE] 删除课程ID={course_id} 级联删除={removed}")
        return removed
