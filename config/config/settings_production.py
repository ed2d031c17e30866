"""
Ajustes de producción para WingaPlus.

Extiende ``settings.py``: PostgreSQL vía DATABASE_URL, cookies seguras,
correo SMTP para las garantías y log rotativo en ``logs/wingaplus.log``.
Uso: DJANGO_SETTINGS_MODULE=config.settings_production
"""

import os

import dj_database_url

from .settings import *  # noqa: F401,F403
from .settings import BASE_DIR, LOGGING, env_bool

DEBUG = False

ALLOWED_HOSTS = [host for host in os.getenv('ALLOWED_HOSTS', '').split(',') if host]

if not os.getenv('DATABASE_URL'):
    raise RuntimeError('DATABASE_URL es obligatorio en producción')
DATABASES = {
    'default': dj_database_url.config(conn_max_age=600, ssl_require=env_bool('DATABASE_SSL', False))
}

# Detrás de proxy HTTPS
SECURE_SSL_REDIRECT = env_bool('SECURE_SSL_REDIRECT', True)
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SECURE_HSTS_SECONDS = int(os.getenv('SECURE_HSTS_SECONDS', 0))
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

CORS_ALLOWED_ORIGINS = [origin for origin in os.getenv('CORS_ALLOWED_ORIGINS', '').split(',') if origin]

# Correo de garantías por SMTP (Gmail u otro relay)
EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtp.gmail.com')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', 587))
EMAIL_USE_TLS = env_bool('EMAIL_USE_TLS', True)
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
EMAIL_TIMEOUT = int(os.getenv('EMAIL_TIMEOUT', 10))
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', EMAIL_HOST_USER)

LOG_DIR = BASE_DIR / 'logs'
os.makedirs(LOG_DIR, exist_ok=True)

# Misma configuración que en desarrollo más un archivo rotativo
LOGGING['handlers']['console']['level'] = 'WARNING'
LOGGING['handlers']['file'] = {
    'level': 'INFO',
    'class': 'logging.handlers.RotatingFileHandler',
    'filename': LOG_DIR / 'wingaplus.log',
    'maxBytes': 5 * 1024 * 1024,
    'backupCount': 5,
    'formatter': 'simple',
}
LOGGING['root']['handlers'] = ['console', 'file']
for logger_name in ('django', 'shop'):
    LOGGING['loggers'][logger_name]['handlers'] = ['console', 'file']
LOGGING['loggers']['django.request'] = {
    'handlers': ['console', 'file'],
    'level': 'ERROR',
    'propagate': False,
}
