"""评语模板服务"""
from sqlalchemy import or_

from app.extensions import db
from app.models import CommentTemplate, TemplateCategory, UserRole
from app.errors import MissingField, ValidationError, TemplateNotFound, NotOwner


SYSTEM_TEMPLATES = [
    (TemplateCategory.EXCELLENT, '操作规范，完成出色，展现了扎实的专业技能！'),
    (TemplateCategory.EXCELLENT, '实训过程认真仔细，成果质量优秀，继续保持！'),
    (TemplateCategory.GOOD, '整体表现良好，注意细节方面还可以再提升。'),
    (TemplateCategory.GOOD, '基本功扎实，建议多加练习提高熟练度。'),
    (TemplateCategory.AVERAGE, '完成了基本要求，但还需要加强练习。'),
    (TemplateCategory.AVERAGE, '操作流程基本正确，注意规范性。'),
    (TemplateCategory.NEEDS_IMPROVEMENT, '未达到基本要求，请认真复习后重新提交。'),
    (TemplateCategory.NEEDS_IMPROVEMENT, '操作存在明显问题，建议寻求老师指导后再次尝试。'),
    (TemplateCategory.ENCOURAGEMENT, '有进步，继续努力！'),
]


class TemplateService:
    """评语模板服务类"""

    @staticmethod
    def templates_for(principal, category=None):
        """教师可用的模板：系统模板 + 本人模板"""
        principal.require_role(UserRole.TEACHER, UserRole.ADMIN)
        query = CommentTemplate.query
        if principal.is_teacher:
            query = query.filter(or_(
                CommentTemplate.is_system.is_(True),
                CommentTemplate.teacher_id == principal.principal_id
            ))
        if category:
            query = query.filter(CommentTemplate.category == category)
        return query.order_by(CommentTemplate.category.asc(), CommentTemplate.id.asc()).all()

    @staticmethod
    def _validate(content, category):
        content = (content or '').strip()
        if not content:
            raise MissingField('评语内容不能为空', field='content')
        if category not in TemplateCategory.LABELS:
            raise ValidationError(f'未知的评语分类：{category}')
        return content

    @staticmethod
    def create_template(principal, content, category):
        """创建模板：教师创建个人模板，管理员创建系统模板"""
        principal.require_role(UserRole.TEACHER, UserRole.ADMIN)
        content = TemplateService._validate(content, category)
        template = CommentTemplate(
            content=content,
            category=category,
            is_system=principal.is_admin,
            teacher_id=None if principal.is_admin else principal.principal_id
        )
        db.session.add(template)
        db.session.commit()
        return template

    @staticmethod
    def _get_editable(principal, template_id):
        template = db.session.get(CommentTemplate, template_id)
        if template is None:
            raise TemplateNotFound(template_id)
        if template.is_system:
            principal.require_role(UserRole.ADMIN)
        elif template.teacher_id != principal.principal_id:
            raise NotOwner('只能修改自己的评语模板')
        return template

    @staticmethod
    def update_template(principal, template_id, content, category):
        template = TemplateService._get_editable(principal, template_id)
        template.content = TemplateService._validate(content, category)
        template.category = category
        db.session.commit()
        return template

    @staticmethod
    def delete_template(principal, template_id):
        template = TemplateService._get_editable(principal, template_id)
        db.session.delete(template)
        db.session.commit()

    @staticmethod
    def resolve_comment(principal, template_id):
        """返回模板文本（原样复制到评语中）"""
        template = db.session.get(CommentTemplate, template_id)
        if template is None:
            raise TemplateNotFound(template_id)
        if not template.is_system and template.teacher_id != principal.principal_id:
            raise NotOwner('不能使用其他教师的评语模板')
        return template.content

    @staticmethod
    def ensure_system_templates():
        """写入默认系统模板（已有系统模板时跳过），返回新增数量"""
        if CommentTemplate.query.filter_by(is_system=True).first() is not None:
            return 0
        for category, content in SYSTEM_TEMPLATES:
            db.session.add(CommentTemplate(content=content, category=category, is_system=True))
        db.session.commit()
        return len(SYSTEM_TEMPLATES)
