"""
Django settings for thrift-studio.

All secrets and provider credentials come from environment variables
(or a .env file in the project root).
"""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-thrift-studio-dev-key')
DEBUG = env_bool('DJANGO_DEBUG', False)
ALLOWED_HOSTS = [h.strip() for h in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'django_filters',
    'django_celery_results',
    'channels',
    'fashion_models',
    'tryon',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'thrift_studio.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'thrift_studio.wsgi.application'
ASGI_APPLICATION = 'thrift_studio.asgi.application'

if os.getenv('POSTGRES_DB'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('POSTGRES_DB'),
            'USER': os.getenv('POSTGRES_USER', ''),
            'PASSWORD': os.getenv('POSTGRES_PASSWORD', ''),
            'HOST': os.getenv('POSTGRES_HOST', 'localhost'),
            'PORT': os.getenv('POSTGRES_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# REST framework / JWT
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_FILTER_BACKENDS': ['django_filters.rest_framework.DjangoFilterBackend'],
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(hours=12),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=7),
}

# Cache (rate limiting)
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.redis.RedisCache',
        'LOCATION': os.getenv('CACHE_REDIS_URL', 'redis://localhost:6379/1'),
    }
}
RATELIMIT_USE_CACHE = 'default'
RATELIMIT_ENABLE = env_bool('RATELIMIT_ENABLE', True)

# Celery
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'django-db')

# Channels
CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels_redis.core.RedisChannelLayer',
        'CONFIG': {
            'hosts': [os.getenv('CHANNELS_REDIS_URL', 'redis://localhost:6379/2')],
        },
    },
}

# Object storage (BunnyCDN)
BUNNY_STORAGE_ZONE = os.getenv('BUNNY_STORAGE_ZONE', '')
BUNNY_ACCESS_KEY = os.getenv('BUNNY_ACCESS_KEY', '')
BUNNY_PULL_ZONE = os.getenv('BUNNY_PULL_ZONE', '')

# AI providers
FASHN_AI_API_KEY = os.getenv('FASHN_AI_API_KEY', '')
REMOVE_BG_API_KEY = os.getenv('REMOVE_BG_API_KEY', '')

TRYON_CONFIG = {
    'base_url': os.getenv('FASHN_AI_BASE_URL', 'https://api.fashn.ai/v1'),
    'model_name': os.getenv('FASHN_AI_MODEL_NAME', 'tryon-v1.6'),
    'poll_interval_seconds': float(os.getenv('TRYON_POLL_INTERVAL_SECONDS', '4')),
    'max_poll_attempts': int(os.getenv('TRYON_MAX_POLL_ATTEMPTS', '15')),
    'timeout_seconds': float(os.getenv('TRYON_TIMEOUT_SECONDS', '60')),
    'request_timeout': float(os.getenv('TRYON_REQUEST_TIMEOUT', '30')),
    'remove_bg_url': os.getenv('REMOVE_BG_URL', 'https://api.remove.bg/v1.0/removebg'),
    # Stock images used when the catalog has no active model. Empty means
    # try-on is skipped instead.
    'default_model_images': {
        'women': os.getenv('TRYON_DEFAULT_MODEL_IMAGE_WOMEN', ''),
        'men': os.getenv('TRYON_DEFAULT_MODEL_IMAGE_MEN', ''),
        'unisex': os.getenv('TRYON_DEFAULT_MODEL_IMAGE_UNISEX', ''),
    },
    'rate_limit': os.getenv('TRYON_RATE_LIMIT', '20/h'),
}

FASHION_MODEL_SELECTION = {
    # Overrides for fashion_models.selection.ScoringWeights fields
    'weights': {},
    'recent_usage_window_days': int(os.getenv('FASHION_MODEL_RECENT_WINDOW_DAYS', '7')),
    'recommendation_limit_max': 10,
}

# Logging
LOG_LEVEL = os.getenv('DJANGO_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {process:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'tryon': {
            'level': LOG_LEVEL,
        },
        'fashion_models': {
            'level': LOG_LEVEL,
        },
        'celery': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
