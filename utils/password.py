# utils/password.py
from werkzeug.security import generate_password_hash, check_password_hash
from flask import current_app


def hash_password(plain: str) -> str:
    return generate_password_hash(plain)


def verify_password(hashed: str, plain: str) -> bool:
    if not hashed or plain is None:
        return False
    return check_password_hash(hashed, plain)


def validate_password_policy(email: str, pwd: str) -> list[str]:
    min_len = current_app.config.get("PASSWORD_MIN_LENGTH", 6)
    errs = []
    if len(pwd) < min_len:
        errs.append(f"Password must be at least {min_len} characters")
    if email and pwd.lower() == email.lower():
        errs.append("Password must not equal the email address")
    return errs
