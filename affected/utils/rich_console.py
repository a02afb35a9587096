from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from affected.analyzer.package_graph.dependency_types import ChangeImpactResult
from affected.analyzer.package_graph.package_graph import PackageGraph
from affected.utils.subprocess_util import SubprocessUtil

# 結果出力用(stdout)
console = Console(highlight=False)
# 詳細表示とエラー用(stderr)
err_console = Console(stderr=True, width=120)


def prepare_table_common(title: str, title_style: str = "bold") -> Table:
    table = Table(title=title, title_style=title_style)
    table.add_column("パッケージ", style="cyan", no_wrap=True)
    table.add_column("状態")
    table.add_column("ディレクトリ")

    # ローカルマシンに設定されているタイムゾーンを取得
    local_tz = datetime.now().astimezone().tzinfo
    table.caption = f"取得日時: {datetime.now(tz=local_tz).strftime('%Y-%m-%d %H:%M:%S')}"
    table.caption_justify = "left"
    return table


def display_impact_result(result: ChangeImpactResult, package_graph: PackageGraph) -> None:
    """
    影響範囲の分析結果を整形して表示します。
    """
    table = prepare_table_common(f"影響範囲 (変更ファイル: {len(result['changed_files'])})")

    affected = set(result["affected_packages"])
    for package in package_graph.package_list():
        if package.name in affected:
            status = "[red]affected[/red]"
        else:
            status = "[green]excluded[/green]"
        table.add_row(package.name, status, str(package.directory))

    err_console.print(Panel(table, title=str(package_graph.root), border_style="white"))


def display_command(command: list[str]) -> None:
    """--no-run で生成したコマンドを表示します(コピペでそのまま実行できる形)。"""
    console.print(SubprocessUtil.join(command), markup=False, soft_wrap=True)


def display_message(message: str) -> None:
    console.print(message, markup=False, soft_wrap=True)


def display_error(message: str) -> None:
    err_console.print(f"[red]エラー:[/red] {escape(message)}", highlight=False)

