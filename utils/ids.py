# -*- coding: utf-8 -*-
"""业务主键生成：PREFIX-<毫秒时间戳>-<随机串>，例如 BUG-1718000000000-k3j9x0a2b。"""

from __future__ import annotations

import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_id(prefix: str, random_length: int = 9) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{_random_base36(random_length)}"


def generate_module_id() -> str:
    return f"MOD_{int(time.time() * 1000)}_{_random_base36(5).upper()}"


def version_id_from_number(version_number: str) -> str:
    return "VER_" + str(version_number).strip().replace(".", "_")


def stored_file_name(kind: str, ext: str) -> str:
    return f"{kind}-attachment-{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"
