# extensions/logger.py
import os, sys, logging, json, uuid, time
from logging.handlers import RotatingFileHandler
from flask import g, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

_REQUEST_ID_KEY = "request_id"
REQUEST_ID_HEADER = "X-Request-ID"


class JsonFormatter(logging.Formatter):
    def format(self, record):
        data = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "request_id"):
            data["request_id"] = record.request_id
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


class RequestIdFilter(logging.Filter):
    def filter(self, record):
        from flask import has_request_context
        if has_request_context():
            record.request_id = getattr(g, _REQUEST_ID_KEY, "-")
        else:
            record.request_id = "-"
        return True


def _ensure_request_id():
    if not hasattr(g, _REQUEST_ID_KEY):
        # 上游网关传入的 request id 优先
        incoming = request.headers.get(REQUEST_ID_HEADER)
        setattr(g, _REQUEST_ID_KEY, incoming or uuid.uuid4().hex)
    return getattr(g, _REQUEST_ID_KEY)


def init_logger(app):
    cfg = app.config
    level = getattr(logging, cfg["LOG_LEVEL"].upper(), logging.INFO)

    _register_hooks(app)

    root = logging.getLogger()
    # 避免重复添加（测试中会多次 create_app）
    if root.handlers:
        return

    log_dir = cfg["LOG_DIR"]
    os.makedirs(log_dir, exist_ok=True)
    root.setLevel(level)

    text_fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(request_id)s | %(name)s | %(message)s",
        "%Y-%m-%d %H:%M:%S"
    )
    json_fmt = JsonFormatter()

    def make_handler(filename, lvl=None):
        h = RotatingFileHandler(
            os.path.join(log_dir, filename),
            maxBytes=cfg["LOG_MAX_BYTES"],
            backupCount=cfg["LOG_BACKUP_COUNT"],
            encoding="utf-8"
        )
        h.setLevel(lvl or level)
        h.setFormatter(json_fmt if cfg["LOG_JSON"] else text_fmt)
        h.addFilter(RequestIdFilter())
        return h

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(json_fmt if cfg["LOG_JSON"] else text_fmt)
    console.addFilter(RequestIdFilter())

    root.addHandler(console)
    root.addHandler(make_handler("app.log"))
    root.addHandler(make_handler("error.log", logging.ERROR))

    # 降低 noisy 包
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.INFO)

    app.logger.info("Logger initialized for %s", cfg.get("APP_NAME"))


def _register_hooks(app):
    @app.before_request
    def _before():
        g._req_start = time.time()
        _ensure_request_id()
        app.logger.info(f"REQ {request.method} {request.path} from {request.remote_addr}")

    @app.after_request
    def _after(resp):
        duration = (time.time() - getattr(g, "_req_start", time.time())) * 1000
        resp.headers[REQUEST_ID_HEADER] = getattr(g, _REQUEST_ID_KEY, "-")
        app.logger.info(f"RESP {request.method} {request.path} {resp.status_code} {duration:.1f}ms")
        return resp

    @app.errorhandler(Exception)
    def _err(e):
        from utils.response import error_response
        if isinstance(e, HTTPException):
            return error_response(e.description, e.code)
        if isinstance(e, SQLAlchemyError):
            # 存储层异常：回滚当前会话，消息透传
            app.logger.exception("STORE ERROR")
            from extensions.store import get_store
            get_store().rollback()
            return error_response(str(getattr(e, "orig", None) or e), 500)
        app.logger.exception("UNHANDLED EXCEPTION")
        return error_response("Internal server error", 500)
