#!/usr/bin/env python
"""
MolView 命令行工具

使用方式:
    python scripts/molview.py view water
    python scripts/molview.py ask water "Why is the molecule bent?"
    python scripts/molview.py history methane
"""
import argparse
import sys

from core.molecules.structure import Structure
from logging_config import setup_logging, get_logger
from sdk.molview_client import ChatSession, MolViewClient, MolViewError

logger = get_logger(__name__)


def cmd_view(client: MolViewClient, args: argparse.Namespace) -> int:
    from viewer.view import MoleculeView

    molecule = client.find_molecule(args.name)
    structure = Structure.from_dict(molecule.structure)

    with MoleculeView(structure, title=f"{molecule.name} ({molecule.formula})") as view:
        view.show()
    return 0


def cmd_ask(client: MolViewClient, args: argparse.Namespace) -> int:
    molecule = client.find_molecule(args.name)
    session = ChatSession(client, molecule.id)
    session.ask(args.question)
    print(session.format_transcript())
    return 0


def cmd_history(client: MolViewClient, args: argparse.Namespace) -> int:
    molecule = client.find_molecule(args.name)
    session = ChatSession(client, molecule.id)
    session.refresh()
    print(session.format_transcript())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MolView 分子查看与问答")
    parser.add_argument("--url", default="http://localhost:8000", help="API 服务器地址")
    parser.add_argument("--timeout", type=float, default=60.0, help="请求超时（秒）")

    subparsers = parser.add_subparsers(dest="command", required=True)

    view = subparsers.add_parser("view", help="打开 3D 视图")
    view.add_argument("name", help="分子名称")
    view.set_defaults(func=cmd_view)

    ask = subparsers.add_parser("ask", help="针对分子提问")
    ask.add_argument("name", help="分子名称")
    ask.add_argument("question", help="问题")
    ask.set_defaults(func=cmd_ask)

    history = subparsers.add_parser("history", help="查看问答历史")
    history.add_argument("name", help="分子名称")
    history.set_defaults(func=cmd_history)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(log_format="console")

    with MolViewClient(args.url, timeout=args.timeout) as client:
        try:
            return args.func(client, args)
        except (MolViewError, ValueError) as e:
            logger.error("command_failed", command=args.command, error=str(e))
            print(f"Error: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
