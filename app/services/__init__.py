"""服务层包"""
from app.services.registry_service import RegistryService
from app.services.task_service import TaskService
from app.services.attendance_service import AttendanceService
from app.services.submission_service import SubmissionService
from app.services.evaluation_service import EvaluationService, BatchItemResult
from app.services.report_service import ReportService, WindowReport
from app.services.course_service import CourseService
from app.services.template_service import TemplateService
from app.services.import_service import ImportService
from app.services.log_service import LogService

__all__ = [
    'RegistryService', 'TaskService', 'AttendanceService', 'SubmissionService',
    'EvaluationService', 'BatchItemResult', 'ReportService', 'WindowReport',
    'CourseService', 'TemplateService', 'ImportService', 'LogService'
]
