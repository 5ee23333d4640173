import logging
import os
import pathlib


def _load_dotenv_if_present() -> None:
    # Optional, no dependency: load simple KEY=VALUE lines
    env_path = pathlib.Path(__file__).parent / ".env"
    if env_path.exists():
        for line in env_path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' in line:
                k, v = line.split('=', 1)
                os.environ.setdefault(k.strip(), v.strip())


_load_dotenv_if_present()


def normalize_prefix(prefix: str) -> str:
    stripped = prefix.strip().strip('/')
    if not stripped:
        raise ValueError('route prefix must name a collection, e.g. /users')
    return '/' + stripped


_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}


class Config:
    def __init__(self) -> None:
        self.host: str = os.environ.get('HOST', 'localhost')
        self.port: int = self._coerce_port(os.environ.get('PORT', '8080'))
        self.route_prefix: str = normalize_prefix(os.environ.get('ROUTE_PREFIX', '/users'))
        self.seed: bool = self._coerce_bool('SEED', os.environ.get('SEED', 'true'))
        self.log_level: str = self._coerce_log_level(os.environ.get('LOG_LEVEL', 'INFO'))

    @staticmethod
    def _coerce_port(raw: str) -> int:
        try:
            value = int(raw)
        except ValueError as exc:
            raise ValueError(f'Invalid port number: {raw!r}') from exc
        if value < 0 or value > 65535:
            raise ValueError(f'Invalid port number: {value}')
        return value

    @staticmethod
    def _coerce_bool(name: str, raw: str) -> bool:
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ValueError(f'{name} must be a boolean, got {raw!r}')

    @staticmethod
    def _coerce_log_level(raw: str) -> str:
        level = raw.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f'Unknown LOG_LEVEL: {raw!r}')
        return level
