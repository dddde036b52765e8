"""辅助函数"""
from datetime import datetime, date, time, timedelta, timezone
from urllib.parse import urlparse
from flask import current_app, has_app_context, request

from app.errors import ValidationError


BEIJING_TZ = timezone(timedelta(hours=8))


def utc_now():
    """当前UTC时间（naive，数据库统一按UTC存储）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_local_tz():
    """获取配置的本地时区，默认北京时间"""
    if has_app_context():
        return current_app.config.get('TIMEZONE', BEIJING_TZ)
    return BEIJING_TZ


def to_local_time(utc_dt):
    """将UTC时间转换为本地时间"""
    if utc_dt is None:
        return None
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)
    return utc_dt.astimezone(get_local_tz())


def local_now(now=None):
    """本地当前时间；now为naive UTC时间，便于测试注入"""
    return to_local_time(now if now is not None else utc_now())


def local_date_range_to_utc(start_date, end_date):
    """将本地日期区间[start, end]转换为UTC的半开区间[start, end+1)"""
    tz = get_local_tz()
    start_dt = datetime.combine(start_date, time.min, tzinfo=tz)
    end_dt = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=tz)
    return (start_dt.astimezone(timezone.utc).replace(tzinfo=None),
            end_dt.astimezone(timezone.utc).replace(tzinfo=None))


def format_time(value):
    """时间格式化为HH:MM"""
    if value is None:
        return None
    return value.strftime('%H:%M')


def parse_date(value):
    """解析YYYY-MM-DD格式日期，空值返回None"""
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), '%Y-%m-%d').date()


def parse_time(value):
    """解析HH:MM或HH:MM:SS格式时间，空值返回None"""
    if value is None or value == '':
        return None
    if isinstance(value, time):
        return value
    value = value.strip()
    fmt = '%H:%M:%S' if value.count(':') == 2 else '%H:%M'
    return datetime.strptime(value, fmt).time()


def is_valid_url(url):
    """检查是否为合法的http(s) URL"""
    if not isinstance(url, str) or not url.strip():
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def request_data():
    """获取请求数据：优先JSON，其次表单"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def date_arg(name):
    """读取查询参数中的日期，格式错误时抛出ValidationError"""
    try:
        return parse_date(request.args.get(name))
    except ValueError:
        raise ValidationError(f'参数{name}格式应为YYYY-MM-DD', field=name)


def parse_id_list(values):
    """解析ID列表，支持列表或逗号分隔字符串"""
    if values is None:
        return []
    if isinstance(values, str):
        values = [v for v in values.split(',') if v.strip()]
    try:
        return [int(v) for v in values]
    except (TypeError, ValueError):
        raise ValidationError('ID列表格式不正确')
