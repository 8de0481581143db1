"""`python -m modkernel.cli` 的命令行启动入口。"""

from modkernel.cli.main import cli


def main() -> int:
    """执行 CLI 并返回进程退出码。"""
    return cli(standalone_mode=True) or 0


if __name__ == "__main__":
    raise SystemExit(main())
