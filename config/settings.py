# config/settings.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
load_dotenv(os.path.join(BASE_DIR, ".env"))  # 自动加载环境变量


def _as_bool(val, default=False):
    if val is None:
        return default
    return str(val).lower() in ("1", "true", "yes", "on")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # 日志相关
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "./logs")
    LOG_JSON = os.getenv("LOG_JSON", "1") == "1"  # 是否 JSON 格式
    LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", 5 * 1024 * 1024))
    LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", 5))
    APP_NAME = os.getenv("APP_NAME", "qa-portal")

    # 上传目录：优先使用持久化挂载点，不可写时回退到本地目录
    UPLOAD_PREFERRED_DIR = os.getenv("UPLOAD_PREFERRED_DIR", "/var/data/uploads")
    ATTACHMENT_STORAGE_DIR = os.getenv(
        "ATTACHMENT_STORAGE_DIR", os.path.join(BASE_DIR, "uploads")
    )
    UPLOAD_MAX_FILE_BYTES = int(os.getenv("UPLOAD_MAX_FILE_BYTES", 10 * 1024 * 1024))
    UPLOAD_MAX_FILES = int(os.getenv("UPLOAD_MAX_FILES", 5))
    UPLOAD_ALLOWED_EXTENSIONS = tuple(
        ext.strip().lower()
        for ext in os.getenv(
            "UPLOAD_ALLOWED_EXTENSIONS",
            "jpeg,jpg,png,gif,pdf,doc,docx,xls,xlsx,txt,zip,rar,mp4,mov,avi",
        ).split(",")
        if ext.strip()
    )
    # 整个请求体上限 = 单文件上限 * 文件数 + 表单字段余量
    MAX_CONTENT_LENGTH = UPLOAD_MAX_FILE_BYTES * UPLOAD_MAX_FILES + 1024 * 1024

    # 启动时建表 / 写入默认数据
    AUTO_CREATE_TABLES = _as_bool(os.getenv("AUTO_CREATE_TABLES"), True)
    SEED_DEFAULTS = _as_bool(os.getenv("SEED_DEFAULTS"), True)

    # 默认管理员（首次启动自动创建）
    ADMIN_INIT_EMAIL = os.getenv("ADMIN_INIT_EMAIL", "admin@qa-portal.local")
    ADMIN_INIT_PASSWORD = os.getenv("ADMIN_INIT_PASSWORD", "admin123")
    ADMIN_INIT_NAME = os.getenv("ADMIN_INIT_NAME", "System Administrator")
    TESTER_INIT_EMAIL = os.getenv("TESTER_INIT_EMAIL", "tester@qa-portal.local")
    TESTER_INIT_PASSWORD = os.getenv("TESTER_INIT_PASSWORD", "tester123")

    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", 6))

    # 列表分页
    LIST_DEFAULT_LIMIT = int(os.getenv("LIST_DEFAULT_LIMIT", 100))
    LIST_MAX_LIMIT = int(os.getenv("LIST_MAX_LIMIT", 1000))


class DevelopmentConfig(BaseConfig):
    ENV_NAME = "development"
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DEV_DATABASE_URI", "sqlite:///" + os.path.join(BASE_DIR, "qa_portal.db")
    )


class ProductionConfig(BaseConfig):
    ENV_NAME = "production"
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")


class TestingConfig(BaseConfig):
    ENV_NAME = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite:///:memory:")
    # 测试夹具自行 create_all / drop_all
    AUTO_CREATE_TABLES = False
    SEED_DEFAULTS = False
    LOG_JSON = False


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name):
    return config_map.get(config_name, DevelopmentConfig)
