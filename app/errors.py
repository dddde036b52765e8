"""业务异常定义

服务层只抛出 ``CoreError`` 的子类，路由层据此转换为HTTP状态码和提示信息。
每个叶子异常带有稳定的 ``code``，便于前端或调用方区分失败原因。
"""


class CoreError(Exception):
    """业务异常基类"""
    code = 'CoreError'
    http_status = 400
    default_message = '操作失败'

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self):
        data = {'success': False, 'code': self.code, 'message': self.message}
        if self.context:
            data['context'] = self.context
        return data


# ---------------------------------------------------------------------------
# 输入校验
# ---------------------------------------------------------------------------

class ValidationError(CoreError):
    code = 'ValidationError'
    http_status = 400
    default_message = '输入不合法'


class MissingField(ValidationError):
    code = 'MissingField'
    default_message = '缺少必填字段'


class EmptySubmission(ValidationError):
    code = 'EmptySubmission'
    default_message = '请填写成果描述或上传至少一个文件'


class TooManyArtifacts(ValidationError):
    code = 'TooManyArtifacts'
    default_message = '附件数量超过上限'


class InvalidArtifactUrl(ValidationError):
    code = 'InvalidArtifactUrl'
    default_message = '附件地址不是合法的URL'


class ScoreOutOfRange(ValidationError):
    code = 'ScoreOutOfRange'
    default_message = '评分必须在0-100之间'


class InvalidTimeWindow(ValidationError):
    code = 'InvalidTimeWindow'
    default_message = '结束时间不能早于开始时间'


class CheckInNotOpen(ValidationError):
    code = 'CheckInNotOpen'
    default_message = '任务尚未开始，暂不能打卡'


class InvalidImportFile(ValidationError):
    code = 'InvalidImportFile'
    default_message = '导入文件格式不正确'


# ---------------------------------------------------------------------------
# 权限
# ---------------------------------------------------------------------------

class AuthorizationError(CoreError):
    code = 'AuthorizationError'
    http_status = 403
    default_message = '您没有权限执行此操作'


class NotEnrolled(AuthorizationError):
    code = 'NotEnrolled'
    default_message = '您未选修该任务所属课程'


class NotAssigned(AuthorizationError):
    code = 'NotAssigned'
    default_message = '您不是该课程的任课教师'


class NotOwner(AuthorizationError):
    code = 'NotOwner'
    default_message = '只能操作自己的记录'


class NotAuthor(AuthorizationError):
    code = 'NotAuthor'
    default_message = '只能修改自己给出的评价'


class RoleNotPermitted(AuthorizationError):
    code = 'RoleNotPermitted'
    default_message = '当前角色不能执行此操作'


class AdminRequired(RoleNotPermitted):
    code = 'AdminRequired'
    default_message = '需要管理员权限'


# ---------------------------------------------------------------------------
# 状态冲突
# ---------------------------------------------------------------------------

class ConflictError(CoreError):
    code = 'ConflictError'
    http_status = 409
    default_message = '数据状态冲突'


class DuplicateCheckIn(ConflictError):
    code = 'DuplicateCheckIn'
    default_message = '该任务已打卡，不能重复打卡'


class AlreadyEvaluated(ConflictError):
    code = 'AlreadyEvaluated'
    default_message = '该成果已评价'


class SubmissionLocked(ConflictError):
    code = 'SubmissionLocked'
    default_message = '成果已评价，不能再修改'


class PendingSubmissionExists(ConflictError):
    code = 'PendingSubmissionExists'
    default_message = '该任务已有待评价的提交，请修改原提交'


class DuplicateTaskNumber(ConflictError):
    code = 'DuplicateTaskNumber'
    default_message = '任务编号已存在'


class DuplicateName(ConflictError):
    code = 'DuplicateName'
    default_message = '名称已存在'


# ---------------------------------------------------------------------------
# 不存在
# ---------------------------------------------------------------------------

class NotFoundError(CoreError):
    code = 'NotFound'
    http_status = 404
    entity = '记录'

    def __init__(self, entity_id=None, message=None):
        self.entity_id = entity_id
        super().__init__(message or f'{self.entity}不存在（ID: {entity_id}）', entity_id=entity_id)


class TaskNotFound(NotFoundError):
    code = 'TaskNotFound'
    entity = '实训任务'


class SubmissionNotFound(NotFoundError):
    code = 'SubmissionNotFound'
    entity = '成果提交'


class EvaluationNotFound(NotFoundError):
    code = 'EvaluationNotFound'
    entity = '评价'


class CourseNotFound(NotFoundError):
    code = 'CourseNotFound'
    entity = '课程'


class MajorNotFound(NotFoundError):
    code = 'MajorNotFound'
    entity = '专业'


class UserNotFound(NotFoundError):
    code = 'UserNotFound'
    entity = '用户'


class TemplateNotFound(NotFoundError):
    code = 'TemplateNotFound'
    entity = '评语模板'
