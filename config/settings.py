import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.getenv('DEBUG', '0') == '1'
ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'corsheaders',
    'rxsearch',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

# catalog 只在内存里，数据库只是 Django 启动需要
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
USE_TZ = True
TIME_ZONE = 'UTC'

# CORS
CORS_ALLOW_ALL_ORIGINS = os.getenv('CORS_ALLOW_ALL_ORIGINS', '1') == '1'

# Catalog datasets（进程启动时加载一次）
RXSEARCH_MEDICATION_CATALOG = Path(
    os.getenv('RXSEARCH_MEDICATION_CATALOG', BASE_DIR / 'rxsearch' / 'data' / 'medications.json')
)
RXSEARCH_TEST_CATALOG = Path(
    os.getenv('RXSEARCH_TEST_CATALOG', BASE_DIR / 'rxsearch' / 'data' / 'tests.json')
)

# Search heuristics
SEARCH_DEFAULT_LIMIT = int(os.getenv('SEARCH_DEFAULT_LIMIT', '10'))       # POST 默认
SEARCH_GET_DEFAULT_LIMIT = int(os.getenv('SEARCH_GET_DEFAULT_LIMIT', '20'))  # GET 默认
SEARCH_MAX_LIMIT = int(os.getenv('SEARCH_MAX_LIMIT', '50'))
# 按 match strength 覆盖基础 confidence，例如 {'EXACT': 0.9}；必须严格递减
SEARCH_CONFIDENCE = {}
SEARCH_PEDIATRIC_AGE = float(os.getenv('SEARCH_PEDIATRIC_AGE', '12'))
SEARCH_GERIATRIC_AGE = float(os.getenv('SEARCH_GERIATRIC_AGE', '65'))
SEARCH_AGE_CONFIDENCE_FACTOR = float(os.getenv('SEARCH_AGE_CONFIDENCE_FACTOR', '0.9'))
SEARCH_ALLERGY_CONFIDENCE_FACTOR = float(os.getenv('SEARCH_ALLERGY_CONFIDENCE_FACTOR', '0.5'))

# Remote suggestions（"" / "none" 关闭，只用本地 catalog）
LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'anthropic')
LLM_TIMEOUT_SECONDS = float(os.getenv('LLM_TIMEOUT_SECONDS', '10'))
LLM_MAX_RETRIES = int(os.getenv('LLM_MAX_RETRIES', '1'))
LLM_MAX_TOKENS = int(os.getenv('LLM_MAX_TOKENS', '500'))

# Logging
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
        'rxsearch': {
            'handlers': ['console'],
            'level': os.getenv('RXSEARCH_LOG_LEVEL', 'INFO'),
        },
    },
}
