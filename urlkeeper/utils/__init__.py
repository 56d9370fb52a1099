from urlkeeper.utils.config import app_env, app_name, app_prefix, project_root, config_dir, load_config
from urlkeeper.utils.helpers import base_url, get_short_url, parse_form_body, text_response, require_environment
from urlkeeper.utils.shortener import KeyGenerator
from urlkeeper.utils.logging import initialize_logging


__all__ = [
    'KeyGenerator',
    'app_env',
    'app_name',
    'app_prefix',
    'project_root',
    'config_dir',
    'load_config',
    'base_url',
    'get_short_url',
    'parse_form_body',
    'text_response',
    'require_environment',
    'initialize_logging',
]
