import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.getenv('DEBUG', '0') == '1'
ALLOWED_HOSTS = ['*']

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'corsheaders',
    'quizagent',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

# 无状态服务，不需要数据库
DATABASES = {}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
USE_TZ = True
TIME_ZONE = 'UTC'

# CORS：只放行已知前端，且只作用于 /api/*
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        'CORS_ALLOWED_ORIGINS',
        'https://alpha-admin-harley.10qbit.com,'
        'https://alpha-app-xflow.10qbit.com,'
        'https://alpha-admin-xflow.10qbit.com,'
        'http://localhost:3000,'
        'http://localhost:3001',
    ).split(',')
    if origin.strip()
]
CORS_URLS_REGEX = r'^/api/.*$'
CORS_ALLOW_CREDENTIALS = True
CORS_PREFLIGHT_MAX_AGE = 86400

# REST Framework
REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'UNAUTHENTICATED_USER': None,
    'EXCEPTION_HANDLER': 'quizagent.exception_handler.unified_exception_handler',
}

# LLM
LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'gemini')
# 单次 LLM 调用超时（秒），超时返回 504
QUIZ_LLM_TIMEOUT = float(os.getenv('QUIZ_LLM_TIMEOUT', '25'))
QUIZ_AGENT_TAG = os.getenv('QUIZ_AGENT_TAG', 'AI-Quiz-Agent-v1')

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'quizagent': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
        },
    },
}
