import argparse
import os
import sys
from pathlib import Path

import affected
from affected import settings
from affected.analyzer.package_graph.cargo.package_graph_cargo import PackageGraphCargo
from affected.analyzer.package_graph.change_impact_analyzer import ChangeImpactAnalyzer
from affected.analyzer.package_graph.dependency_types import ChangeImpactResult
from affected.core.command_template import generate_command
from affected.schema.errors import AffectedError
from affected.schema.schema import AffectedParams, RunCommand
from affected.utils.git_util import GitUtil
from affected.utils.log_util import log, set_debug_level
from affected.utils.rich_console import display_command, display_error, display_impact_result, display_message
from affected.utils.subprocess_util import SubprocessUtil

NO_PACKAGES_MESSAGE = "no packages affected"


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="affected",
        description="直前のコミットで変更されたファイルから、影響を受けるワークスペース内のパッケージを求めます",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="store_true", help="バージョン情報を表示")

    # 全サブコマンド共通のオプション
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-i", "--input", help="対象のワークスペース(未指定ならカレントディレクトリ)", default="")
    common.add_argument("--no-run", action="store_true", help="コマンドを生成して表示するだけで実行しない")
    common.add_argument("--base", help="変更ファイルを取得する比較元リビジョン", default=settings.base_revision)
    common.add_argument(
        "--ext",
        dest="extensions",
        action="append",
        help=f"変更ファイルとして扱う拡張子(複数指定可, デフォルト: {','.join(settings.extensions)})",
        default=None,
    )
    common.add_argument("-v", "--verbose", action="store_true", help="影響範囲の詳細を表示")
    common.add_argument("args", nargs="*", help="-- 以降はテンプレートのargs変数に渡される")

    subparsers = parser.add_subparsers(dest="sub_command", help=RunCommand.get_description())
    for sub_command in RunCommand:
        sub_parser = subparsers.add_parser(
            sub_command.value, parents=[common], formatter_class=argparse.RawTextHelpFormatter
        )
        if sub_command is RunCommand.RUN:
            sub_parser.add_argument(
                "-c",
                "--command",
                help=(
                    "実行するコマンドのテンプレート(jinja形式)\n"
                    "packages: 影響を受けたパッケージ, excludes: それ以外のパッケージ, args: -- 以降の引数\n"
                    "例: 'cargo test {% for pkg in packages %} -p {{ pkg }}{% endfor %}'"
                ),
                default="",
            )
    return parser


def main(argv: list[str] | None = None) -> None:
    """メイン処理(args前処理、パラメータ設定)"""
    parser = create_parser()
    args = parser.parse_args(argv)
    if args.version:  # バージョン情報表示オプションが指定された場合
        show_version_and_exit()

    if args.sub_command is None:  # サブコマンドが指定されていない場合
        show_usage_and_exit(parser)

    if args.verbose:
        set_debug_level()

    show_args(args)
    params = create_params(args)
    sys.exit(main_exec(params))


def create_params(args: argparse.Namespace) -> AffectedParams:
    params = AffectedParams()
    params.sub_command = RunCommand(args.sub_command)
    params.input = args.input
    params.command = getattr(args, "command", "")
    params.no_run = args.no_run
    params.base = args.base
    if args.extensions:
        params.extensions = [ext.lstrip(".").lower() for ext in args.extensions]
    # 区切りの "--" はargparseが1つだけ取り除く。2つ目以降はcargo側の区切りとしてそのまま渡す
    params.args = args.args
    params.verbose = args.verbose
    return params


def main_exec(params: AffectedParams) -> int:
    """メイン処理(影響範囲の分析 -> コマンド生成 -> 実行)。戻り値は終了コード"""
    try:
        root = resolve_root(params.input)
        changed_files = GitUtil.get_changed_files(root, params.base, params.extensions)

        package_graph = PackageGraphCargo(root)
        package_graph.scan_workspace()

        analyzer = ChangeImpactAnalyzer(package_graph)
        result = analyzer.analyze_changes(changed_files)
        if params.verbose:
            display_impact_result(result, package_graph)

        template = params.get_template()
        if not template:
            show_affected_packages(result)
            return 0

        command = generate_command(template, package_graph, result["affected_packages"], params.args)
    except AffectedError as e:
        display_error(e.message)
        return 1

    if params.no_run:
        display_command(command)
        return 0
    return run_command(command, root)


def resolve_root(input_: str) -> Path:
    # cargo metadataのパスはシンボリックリンク解決済みなので合わせる
    return Path(input_ or os.getcwd()).resolve()


def show_affected_packages(result: ChangeImpactResult) -> None:
    affected_packages = result["affected_packages"]
    if not affected_packages:
        display_message(NO_PACKAGES_MESSAGE)
        return
    display_message(" ".join(f"-p {name}" for name in affected_packages))


def run_command(command: list[str], root: Path) -> int:
    """標準出力/標準エラーを引き継いでコマンドを実行し、その終了コードを返す"""
    log("command=%s", command)
    try:
        completed = SubprocessUtil.run(command, cwd=str(root), check=False)
    except OSError as e:
        display_error(f"Failed to run `{command[0]}`: {e}")
        return 1
    return completed.returncode


def show_version_and_exit():
    print(f"affected version {affected.__version__}")
    sys.exit(0)


def show_usage_and_exit(parser: argparse.ArgumentParser):
    display_error("サブコマンドが指定されていません。")
    parser.print_help(sys.stderr)
    sys.exit(1)


def show_args(args: argparse.Namespace):
    for arg, value in vars(args).items():
        if value:
            log(f"args.{arg}={value}")


if __name__ == "__main__":
    main()
