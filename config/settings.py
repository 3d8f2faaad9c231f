from pathlib import Path

from gradebook.env import env_bool, env_float, env_int, env_list, env_str

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = env_str("DJANGO_SECRET_KEY", "dev-secret-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "gradebook",
]

MIDDLEWARE = []

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": env_str("GRADEBOOK_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = env_str("DJANGO_TIME_ZONE", "America/Santiago")
USE_I18N = True
USE_TZ = True

# Grading thresholds; a saved InstitutionSetting row overrides these.
GRADEBOOK_MIN_PASSING_GRADE = env_float("GRADEBOOK_MIN_PASSING_GRADE", 4.0)
GRADEBOOK_MIN_ATTENDANCE_PCT = env_float("GRADEBOOK_MIN_ATTENDANCE_PCT", 75.0)
GRADEBOOK_GRADE_SCALE_MAX = env_float("GRADEBOOK_GRADE_SCALE_MAX", 7.0)
GRADEBOOK_DEFAULT_SESSION_COUNT = env_int("GRADEBOOK_DEFAULT_SESSION_COUNT", 6)
GRADEBOOK_DEFAULT_EVALUATION_COUNT = env_int("GRADEBOOK_DEFAULT_EVALUATION_COUNT", 3)
GRADEBOOK_VERIFICATION_PREFIX = env_str("GRADEBOOK_VERIFICATION_PREFIX", "ACTA")

LOG_LEVEL = env_str("DJANGO_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "grading_context": {"()": "config.logging_filters.EnrollmentContextFilter"},
    },
    "formatters": {
        "grading": {
            "format": "%(asctime)s %(levelname)s %(name)s activity=%(activity_id)s scope=%(scope)s %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["grading_context"],
            "formatter": "grading",
        },
    },
    "loggers": {
        "gradebook": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": True,
        },
    },
}
