"""工具函数包"""
from app.utils.helpers import (
    utc_now, to_local_time, local_now, format_time,
    parse_date, parse_time, is_valid_url, request_data, parse_id_list, date_arg, BEIJING_TZ
)
from app.utils.principal import Principal, principal_from_user, current_principal

__all__ = [
    'utc_now', 'to_local_time', 'local_now', 'format_time',
    'parse_date', 'parse_time', 'is_valid_url', 'BEIJING_TZ',
    'Principal', 'principal_from_user', 'current_principal',
    'request_data', 'parse_id_list', 'date_arg'
]
