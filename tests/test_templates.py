"""Tests for TemplateService: system and teacher-owned comment templates."""
import pytest

from app.errors import AdminRequired, MissingField, NotOwner, TemplateNotFound, ValidationError
from app.models import CommentTemplate, TemplateCategory
from app.services import TemplateService
from app.services.template_service import SYSTEM_TEMPLATES


def test_system_templates_seeded_once(school):
    assert TemplateService.ensure_system_templates() == len(SYSTEM_TEMPLATES)
    assert TemplateService.ensure_system_templates() == 0
    assert CommentTemplate.query.filter_by(is_system=True).count() == len(SYSTEM_TEMPLATES)


def test_teacher_sees_system_and_own(school):
    TemplateService.ensure_system_templates()
    mine = TemplateService.create_template(school.t1, '接线规范，值得表扬', TemplateCategory.EXCELLENT)
    theirs = TemplateService.create_template(school.t2, '注意安全操作', TemplateCategory.NEEDS_IMPROVEMENT)

    visible = {t.id for t in TemplateService.templates_for(school.t1)}
    assert mine.id in visible
    assert theirs.id not in visible
    assert len(visible) == len(SYSTEM_TEMPLATES) + 1

    excellent = TemplateService.templates_for(school.t1, TemplateCategory.EXCELLENT)
    assert all(t.category == TemplateCategory.EXCELLENT for t in excellent)


def test_admin_creates_system_template(school):
    template = TemplateService.create_template(school.admin, '全体通用评语', TemplateCategory.GOOD)
    assert template.is_system
    assert template.teacher_id is None


def test_template_validation(school):
    with pytest.raises(MissingField):
        TemplateService.create_template(school.t1, '  ', TemplateCategory.GOOD)
    with pytest.raises(ValidationError):
        TemplateService.create_template(school.t1, '内容', 'poor')


def test_teacher_cannot_edit_system_template(school):
    TemplateService.ensure_system_templates()
    system = CommentTemplate.query.filter_by(is_system=True).first()
    with pytest.raises(AdminRequired):
        TemplateService.update_template(school.t1, system.id, '改写', system.category)
    with pytest.raises(AdminRequired):
        TemplateService.delete_template(school.t1, system.id)


def test_teacher_edits_only_own_template(school):
    template = TemplateService.create_template(school.t1, '初稿', TemplateCategory.AVERAGE)
    with pytest.raises(NotOwner):
        TemplateService.update_template(school.t2, template.id, '篡改', TemplateCategory.AVERAGE)

    updated = TemplateService.update_template(school.t1, template.id, '定稿', TemplateCategory.GOOD)
    assert (updated.content, updated.category) == ('定稿', TemplateCategory.GOOD)

    template_id = template.id
    TemplateService.delete_template(school.t1, template_id)
    with pytest.raises(TemplateNotFound):
        TemplateService.resolve_comment(school.t1, template_id)


def test_resolve_comment_copies_text(school):
    template = TemplateService.create_template(school.t1, '操作流程基本正确，注意规范性。', TemplateCategory.AVERAGE)
    assert TemplateService.resolve_comment(school.t1, template.id) == '操作流程基本正确，注意规范性。'
    with pytest.raises(NotOwner):
        TemplateService.resolve_comment(school.t2, template.id)
