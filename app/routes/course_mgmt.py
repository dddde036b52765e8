"""专业、课程与实训任务管理路由（仅管理员）"""
from flask import Blueprint, jsonify, request
from flask_login import login_required

from app.services import CourseService, TaskService
from app.utils import current_principal, request_data, date_arg
from app.utils.decorators import require_admin, log_operation

bp = Blueprint('course_mgmt', __name__, url_prefix='/admin')


@bp.route('/majors')
@login_required
@require_admin
def majors():
    return jsonify({'success': True, 'majors': [m.to_dict() for m in CourseService.list_majors()]})


@bp.route('/majors', methods=['POST'])
@login_required
@require_admin
@log_operation('create', '创建专业')
def create_major():
    data = request_data()
    major = CourseService.create_major(current_principal(), data.get('name'), data.get('description'))
    return jsonify({'success': True, 'major': major.to_dict()}), 201


@bp.route('/majors/<int:major_id>', methods=['DELETE'])
@login_required
@require_admin
@log_operation('delete', '删除专业')
def delete_major(major_id):
    removed = CourseService.delete_major(current_principal(), major_id)
    return jsonify({'success': True, 'removed': removed})


@bp.route('/courses')
@login_required
@require_admin
def courses():
    items = CourseService.list_courses(request.args.get('major_id', type=int))
    return jsonify({'success': True, 'courses': [c.to_dict() for c in items]})


@bp.route('/courses', methods=['POST'])
@login_required
@require_admin
@log_operation('create', '创建课程')
def create_course():
    data = request_data()
    major_id = data.get('major_id')
    course = CourseService.create_course(
        current_principal(), data.get('name'),
        int(major_id) if major_id not in (None, '') else None,
        data.get('description'))
    return jsonify({'success': True, 'course': course.to_dict()}), 201


@bp.route('/courses/<int:course_id>', methods=['PUT'])
@login_required
@require_admin
@log_operation('update', '编辑课程')
def update_course(course_id):
    data = request_data()
    course = CourseService.update_course(
        current_principal(), course_id, data.get('name'), data.get('description'))
    return jsonify({'success': True, 'course': course.to_dict()})


@bp.route('/courses/<int:course_id>', methods=['DELETE'])
@login_required
@require_admin
@log_operation('delete', '删除课程')
def delete_course(course_id):
    """删除课程及其任务、打卡、提交、评价，返回各项删除数量"""
    removed = CourseService.delete_course(current_principal(), course_id)
    return jsonify({'success': True, 'removed': removed})


@bp.route('/tasks')
@login_required
@require_admin
def tasks():
    items = TaskService.tasks_visible_to(
        current_principal(), date_from=date_arg('date_from'), date_to=date_arg('date_to'))
    return jsonify({'success': True, 'tasks': [t.to_dict() for t in items]})


@bp.route('/tasks', methods=['POST'])
@login_required
@require_admin
@log_operation('create', '创建实训任务')
def create_task():
    task = TaskService.create_task(current_principal(), request_data())
    return jsonify({'success': True, 'task': task.to_dict()}), 201


@bp.route('/tasks/<int:task_id>', methods=['PUT'])
@login_required
@require_admin
@log_operation('update', '编辑实训任务')
def update_task(task_id):
    task = TaskService.update_task(current_principal(), task_id, request_data())
    return jsonify({'success': True, 'task': task.to_dict()})


@bp.route('/tasks/<int:task_id>', methods=['DELETE'])
@login_required
@require_admin
@log_operation('delete', '删除实训任务')
def delete_task(task_id):
    TaskService.delete_task(current_principal(), task_id)
    return jsonify({'success': True})
