# app.py
import atexit
import logging
import os
import signal
import sys

from flask import Flask
from config.settings import get_config
from extensions.database import db, migrate
from extensions.logger import init_logger
from extensions.store import EntityStore
from utils.response import error_response
from utils.exceptions import BizError
from controllers.auth_controller import auth_bp
from controllers.user_controller import user_bp
from controllers.module_controller import module_bp
from controllers.version_controller import version_bp
from controllers.feature_controller import feature_bp
from controllers.bug_controller import bug_bp
from controllers.test_case_controller import test_case_bp
from controllers.session_controller import session_bp
from controllers.statistics_controller import statistics_bp
from controllers.admin_controller import admin_bp
from controllers.health_controller import health_bp
from controllers.attachment_controller import attachment_bp

logger = logging.getLogger(__name__)


def create_app(config_name="development", overrides=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    # 初始化扩展
    init_logger(app)
    store = EntityStore(db)
    store.init_app(app)
    migrate.init_app(app, db)
    app.logger.info("当前数据库 URI: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    # 登录 / 用户
    app.register_blueprint(auth_bp)
    app.register_blueprint(user_bp)
    # 模块 / 版本
    app.register_blueprint(module_bp)
    app.register_blueprint(version_bp)
    # 功能规划 / 缺陷
    app.register_blueprint(feature_bp)
    app.register_blueprint(bug_bp)
    # 用例 / 测试会话
    app.register_blueprint(test_case_bp)
    app.register_blueprint(session_bp)
    # 统计 / 运维
    app.register_blueprint(statistics_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(health_bp)
    # 上传文件访问
    app.register_blueprint(attachment_bp)

    # 错误处理
    @app.errorhandler(404)
    def not_found(e):
        return error_response("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("Method not allowed", 405)

    @app.errorhandler(413)
    def too_large(e):
        return error_response("File too large", 413)

    @app.errorhandler(500)
    def server_error(e):
        return error_response("Internal server error", 500)

    @app.errorhandler(BizError)
    def _biz_err(e: BizError):
        return error_response(e.message, e.code, e.data)

    return app


def _install_shutdown(store):
    """SIGTERM / SIGINT / 进程退出时释放连接池。"""
    atexit.register(store.close)

    def _handle(signum, _frame):
        logger.info("Received signal %s, shutting down", signum)
        store.close()
        sys.exit(0)

    signal.signal(signal.SIGTERM, _handle)
    signal.signal(signal.SIGINT, _handle)


if __name__ == "__main__":
    app = create_app(os.getenv("APP_ENV", "development"))
    _install_shutdown(app.extensions["entity_store"])
    app.run(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 3001)),
        debug=app.config.get("DEBUG", False),
        use_reloader=False,
    )
