"""课程分配服务：选课/任课关系，所有按课程可见性过滤的唯一入口"""
from flask import current_app
from sqlalchemy import delete, insert, select, func

from app.extensions import db
from app.models import Course, User, UserRole, course_student, course_teacher
from app.errors import AuthorizationError, CourseNotFound, UserNotFound, ValidationError


class RegistryService:
    """课程分配服务类"""

    @staticmethod
    def courses_visible_to(principal):
        """获取调用方可见的课程ID集合

        学生为已选课程，教师为任课课程，管理员为全部课程。
        """
        if principal.is_admin:
            stmt = select(Course.id)
        elif principal.is_teacher:
            stmt = select(course_teacher.c.course_id).where(
                course_teacher.c.teacher_id == principal.principal_id)
        elif principal.is_student:
            stmt = select(course_student.c.course_id).where(
                course_student.c.student_id == principal.principal_id)
        else:
            return set()
        return set(db.session.execute(stmt).scalars().all())

    @staticmethod
    def require_course(principal, course_id, error_cls=AuthorizationError):
        """课程不在可见范围内时抛出指定的权限异常"""
        if course_id not in RegistryService.courses_visible_to(principal):
            raise error_cls()

    @staticmethod
    def assign_courses(admin, user_id, course_ids):
        """保存用户的课程分配（整体替换：先全部删除再插入所选课程）

        教师写入任课表，学生写入选课表。返回保存后的课程ID集合。
        """
        admin.require_role(UserRole.ADMIN)

        user = db.session.get(User, user_id)
        if user is None:
            raise UserNotFound(user_id)

        if user.is_teacher:
            table, column = course_teacher, 'teacher_id'
        elif user.is_student:
            table, column = course_student, 'student_id'
        else:
            raise ValidationError('只能为教师或学生分配课程')

        wanted = set(int(c) for c in (course_ids or []))
        if wanted:
            existing = set(db.session.execute(
                select(Course.id).where(Course.id.in_(wanted))
            ).scalars().all())
            missing = wanted - existing
            if missing:
                raise CourseNotFound(sorted(missing)[0])

        try:
            db.session.execute(delete(table).where(table.c[column] == user_id))
            if wanted:
                db.session.execute(insert(table), [
                    {'course_id': course_id, column: user_id} for course_id in sorted(wanted)
                ])
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[ASSIGN] 用户ID={user_id} 角色={user.role} 课程={sorted(wanted)}")
        return wanted

    @staticmethod
    def students_of(course_ids):
        """获取选修了指定课程的学生ID集合"""
        if not course_ids:
            return set()
        stmt = select(course_student.c.student_id).where(
            course_student.c.course_id.in_(course_ids)).distinct()
        return set(db.session.execute(stmt).scalars().all())

    @staticmethod
    def enrolled_student_count(course_ids):
        """选修了指定课程的学生人数（去重）"""
        if not course_ids:
            return 0
        stmt = select(func.count(func.distinct(course_student.c.student_id))).where(
            course_student.c.course_id.in_(course_ids))
        return db.session.execute(stmt).scalar() or 0

    @staticmethod
    def roster_by_course(course_ids):
        """课程ID -> 选课学生ID集合"""
        roster = {course_id: set() for course_id in course_ids}
        if not course_ids:
            return roster
        rows = db.session.execute(
            select(course_student.c.course_id, course_student.c.student_id).where(
                course_student.c.course_id.in_(course_ids))
        ).all()
        for course_id, student_id in rows:
            roster[course_id].add(student_id)
        return roster
