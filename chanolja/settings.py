import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-insecure-secret-key")
DEBUG = os.environ.get("DJANGO_DEBUG", "False").lower() == "true"
ALLOWED_HOSTS = [h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "rest_framework_simplejwt",
    "django_filters",
    "cloudinary",
    # Local
    "users",
    "branches",
    "inventory",
    "booking",
    "payments",
    "reviews",
    "news",
    "inquiries",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "chanolja.urls"
WSGI_APPLICATION = "chanolja.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# Supabase hosts the production Postgres; local runs fall back to sqlite.
if os.environ.get("SUPABASE_DB_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "HOST": os.environ["SUPABASE_DB_HOST"],
            "PORT": os.environ.get("SUPABASE_DB_PORT", "5432"),
            "NAME": os.environ.get("SUPABASE_DB_NAME", "postgres"),
            "USER": os.environ.get("SUPABASE_DB_USER", "postgres"),
            "PASSWORD": os.environ.get("SUPABASE_DB_PASSWORD", ""),
            "OPTIONS": {"sslmode": os.environ.get("SUPABASE_DB_SSLMODE", "require")},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")

AUTH_USER_MODEL = "users.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator", "OPTIONS": {"min_length": 6}},
]

LANGUAGE_CODE = "ko-kr"
TIME_ZONE = "Asia/Seoul"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.AllowAny",),
    "DEFAULT_FILTER_BACKENDS": ("django_filters.rest_framework.DjangoFilterBackend",),
    "DEFAULT_PAGINATION_CLASS": "pagination.EnvelopePagination",
    "PAGE_SIZE": 20,
    "EXCEPTION_HANDLER": "responses.api_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=int(os.environ.get("JWT_ACCESS_HOURS", "12"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# Cloudinary reads CLOUDINARY_URL from the environment on its own.
CLOUDINARY_URL = os.environ.get("CLOUDINARY_URL", "")

PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")

# Payments / maps
PAYMENT_GATEWAY = os.environ.get("PAYMENT_GATEWAY", "toss")
MAPS_PROVIDER = os.environ.get("MAPS_PROVIDER", "kakao")
STATIC_MAP_PROVIDER = os.environ.get("STATIC_MAP_PROVIDER", "naver")

ADAPTERS_CONFIG = {
    "payments.toss": {
        "secret_key": os.environ.get("TOSS_PAYMENTS_SECRET_KEY", ""),
        "webhook_secret": os.environ.get("TOSS_PAYMENTS_WEBHOOK_SECRET", ""),
        "timeout": 10,
    },
    "payments.fake": {
        "webhook_secret": os.environ.get("TOSS_PAYMENTS_WEBHOOK_SECRET", ""),
    },
    "maps.kakao": {
        "api_key": os.environ.get("KAKAO_REST_API_KEY", ""),
        "timeout": 5,
    },
    "maps.naver": {
        "client_id": os.environ.get("NAVER_MAP_CLIENT_ID", ""),
        "client_secret": os.environ.get("NAVER_MAP_CLIENT_SECRET", ""),
        "timeout": 5,
    },
    "maps.fake": {},
}

SETTLEMENT = {
    "HQ_RATIO": int(os.environ.get("SETTLEMENT_HQ_RATIO", "10")),
    "DEFAULT_BRANCH_SUBMALL_ID": os.environ.get("DEFAULT_BRANCH_SUBMALL_ID", ""),
    "HQ_SUBMALL_ID": os.environ.get("HQ_SUBMALL_ID", ""),
}

BRANCH_TOKEN_TTL_HOURS = int(os.environ.get("BRANCH_TOKEN_TTL_HOURS", "24"))

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {
        "handlers": ["console"],
        "level": os.environ.get("LOG_LEVEL", "INFO"),
    },
}
