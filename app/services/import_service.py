"""批量导入用户服务（CSV/TSV/Excel）"""
import re
from io import BytesIO, StringIO

import pandas as pd
from flask import current_app
from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import User, UserRole, Course
from app.errors import InvalidImportFile


ROLE_ALIASES = {
    '学生': UserRole.STUDENT, 'student': UserRole.STUDENT,
    '教师': UserRole.TEACHER, '老师': UserRole.TEACHER, 'teacher': UserRole.TEACHER,
    '管理员': UserRole.ADMIN, 'admin': UserRole.ADMIN,
}

REQUIRED_COLUMNS = ['姓名', '用户类型']


def safe_str(value):
    """安全转换为字符串，处理NaN值"""
    if value is None or pd.isna(value):
        return ''
    text = str(value).strip()
    # Excel中的纯数字学号会被读成浮点数
    if re.fullmatch(r'\d+\.0', text):
        text = text[:-2]
    return text


def detect_file_type(file_content):
    """通过文件魔数检测真实文件类型"""
    if len(file_content) < 4:
        return 'unknown'
    # XLSX格式（ZIP压缩，PK开头）
    if file_content[:2] == b'PK':
        return 'xlsx'
    # XLS格式（OLE2文档）
    if file_content[:4] == b'\xD0\xCF\x11\xE0':
        return 'xls'
    sample = file_content[:200].decode('utf-8', errors='ignore')
    if ',' in sample or '\t' in sample or '\n' in sample:
        return 'csv'
    return 'unknown'


class ImportService:
    """批量导入服务类"""

    ENCODINGS = ['utf-8-sig', 'utf-8', 'gbk', 'gb2312']

    @staticmethod
    def read_table(file_content, filename=''):
        """读取上传文件为DataFrame（所有列按字符串处理）"""
        file_type = detect_file_type(file_content)
        current_app.logger.info(f"[IMPORT] 文件名: {filename}, 实际文件类型: {file_type}")

        if file_type == 'xlsx':
            df = pd.read_excel(BytesIO(file_content), engine='openpyxl', dtype=str)
        elif file_type == 'csv':
            decoded = None
            for encoding in ImportService.ENCODINGS:
                try:
                    decoded = file_content.decode(encoding)
                    break
                except UnicodeDecodeError:
                    continue
            if decoded is None:
                raise InvalidImportFile('无法解码文件，请使用UTF-8或GBK编码保存')
            delimiter = '\t' if '\t' in decoded[:1024] else ','
            df = pd.read_csv(StringIO(decoded), sep=delimiter, dtype=str)
        else:
            raise InvalidImportFile('只支持CSV/TSV/XLSX文件')

        if df.empty:
            raise InvalidImportFile('文件为空或格式不正确')

        # 清理列名：去除前后空格和BOM标记
        df.columns = [str(c).replace('\ufeff', '').strip() for c in df.columns]
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise InvalidImportFile(f'缺少必要字段: {", ".join(missing)}。当前字段: {", ".join(df.columns)}')
        return df

    @staticmethod
    def import_users(admin, file_content, filename=''):
        """批量导入用户，逐行处理，单行失败不影响其他行

        Returns:
            {'created': 成功数, 'errors': [{'row': 行号, 'message': 原因}]}
        """
        admin.require_role(UserRole.ADMIN)
        df = ImportService.read_table(file_content, filename)
        default_password = current_app.config.get('IMPORT_DEFAULT_PASSWORD', '123456')
        courses_by_name = {c.name: c for c in Course.query.all()}

        created = 0
        errors = []
        for index, row in enumerate(df.to_dict('records'), start=2):  # 第1行为表头
            real_name = safe_str(row.get('姓名'))
            role = ROLE_ALIASES.get(safe_str(row.get('用户类型')).lower())
            student_number = safe_str(row.get('学号')) or None
            employee_number = safe_str(row.get('工号')) or None
            username = safe_str(row.get('用户名')) or student_number or employee_number
            password = safe_str(row.get('密码')) or default_password

            if not real_name:
                errors.append({'row': index, 'message': '姓名不能为空'})
                continue
            if role is None:
                errors.append({'row': index, 'message': f'未知的用户类型: {safe_str(row.get("用户类型"))}'})
                continue
            if not username:
                errors.append({'row': index, 'message': '用户名、学号、工号至少填写一项'})
                continue
            if User.query.filter_by(username=username).first() is not None:
                errors.append({'row': index, 'message': f'用户名 {username} 已存在'})
                continue

            course_names = [n.strip() for n in re.split(r'[;；,，]', safe_str(row.get('课程'))) if n.strip()]
            unknown = [n for n in course_names if n not in courses_by_name]
            if unknown:
                errors.append({'row': index, 'message': f'课程不存在: {", ".join(unknown)}'})
                continue

            try:
                with db.session.begin_nested():
                    user = User(
                        username=username,
                        real_name=real_name,
                        role=role,
                        student_number=student_number if role == UserRole.STUDENT else None,
                        employee_number=employee_number if role != UserRole.STUDENT else None,
                    )
                    user.set_password(password)
                    db.session.add(user)
                    for name in course_names:
                        if role == UserRole.STUDENT:
                            user.enrolled_courses.append(courses_by_name[name])
                        elif role == UserRole.TEACHER:
                            user.teaching_courses.append(courses_by_name[name])
                created += 1
            except IntegrityError as e:
                current_app.logger.warning(f"[IMPORT] 第{index}行导入失败: {e}")
                errors.append({'row': index, 'message': '学号或工号重复'})

        db.session.commit()
        current_app.logger.info(f"[IMPORT] 导入完成：成功{created}条，失败{len(errors)}条")
        return {'created': created, 'errors': errors}
