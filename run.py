#!/usr/bin/env python
"""
HouseOfHire 生命周期服务启动脚本

用法:
    python run.py                    # 127.0.0.1:8000
    python run.py -p 8080 --reload   # 指定端口并开启热重载
    python run.py --host 0.0.0.0 --workers 4
"""
import argparse
import shutil
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).parent
sys.path.insert(0, str(ROOT_DIR))


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="HouseOfHire 申请与面试生命周期服务")
    parser.add_argument("-p", "--port", type=int, default=8000, help="服务端口 (默认: 8000)")
    parser.add_argument("--host", default="127.0.0.1", help="服务地址 (默认: 127.0.0.1)")
    parser.add_argument("--reload", action="store_true", help="开启热重载")
    parser.add_argument("--workers", type=int, default=1, help="工作进程数，热重载时固定为 1")
    return parser.parse_args(argv)


def prepare_env_file() -> None:
    """首次启动时由 .env.example 生成 .env"""
    env_file = ROOT_DIR / ".env"
    env_example = ROOT_DIR / ".env.example"
    if not env_file.exists() and env_example.exists():
        shutil.copy(env_example, env_file)
        print(f"已根据 {env_example.name} 生成 .env，请按需修改")


def main(argv=None):
    args = parse_args(argv)
    prepare_env_file()

    # .env 准备好之后再读取配置
    import uvicorn
    from houseofhire.core.config import settings

    mail_mode = settings.mail_base_url or "控制台输出（未配置 MAIL_BASE_URL）"
    print(f"{settings.app_name} [{settings.app_env}]")
    print(f"  数据库: {settings.database_url}")
    print(f"  邮件服务: {mail_mode}")
    print(f"  地址: http://{args.host}:{args.port}" + ("/docs" if settings.debug else ""))

    uvicorn.run(
        "houseofhire.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1 if args.reload else args.workers,
        log_level="info",
    )


if __name__ == "__main__":
    main()
