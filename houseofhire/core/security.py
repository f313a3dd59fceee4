"""
密码工具模块

直接使用 bcrypt 生成哈希；管理员代注册的账号由系统生成临时密码
"""
import secrets
import string

import bcrypt

_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    """
    生成 bcrypt 哈希
    
    bcrypt 只处理前 72 字节，超长密码直接拒绝
    """
    if not password:
        raise ValueError("密码不能为空")
    
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        raise ValueError("密码不能超过 72 字节")
    
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except ValueError:
        return False


def generate_temp_password(length: int = 12) -> str:
    """生成临时密码（字母+数字，至少包含一个数字）"""
    while True:
        password = "".join(secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length))
        if any(ch.isdigit() for ch in password):
            return password
