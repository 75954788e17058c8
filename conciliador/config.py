# conciliador/config.py
# Runtime settings. Env vars win; otherwise the same platform-dependent
# defaults as before (Linux/cloud -> /tmp, local -> next to the app).

import os
import platform
from dataclasses import dataclass

from .constants import DEFAULT_EXPORT_NAME

_TRUTHY = {'1', 'true', 'yes', 'on'}


def _default_db_path() -> str:
    if platform.system() == "Linux":
        # Cloud: /tmp is always writable
        return "/tmp/conciliador.db"
    base = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(base, '..', 'conciliador.db')


@dataclass(frozen=True)
class AppConfig:
    db_path: str
    log_level: str = 'INFO'
    log_json: bool = False
    export_basename: str = DEFAULT_EXPORT_NAME


def load_config(environ=None) -> AppConfig:
    env = os.environ if environ is None else environ
    return AppConfig(
        db_path=env.get('CONCILIADOR_DB_PATH') or _default_db_path(),
        log_level=(env.get('CONCILIADOR_LOG_LEVEL') or 'INFO').upper(),
        log_json=(env.get('CONCILIADOR_LOG_JSON', '').strip().lower() in _TRUTHY),
        export_basename=env.get('CONCILIADOR_EXPORT_NAME') or DEFAULT_EXPORT_NAME,
    )
