from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from affected import settings

# 組み込みのコマンドテンプレート(jinja形式)
# 変数は packages(影響あり), excludes(影響なし), args(-- 以降の追加引数) の3つだけ使える
CARGO_TEST_TEMPLATE = (
    "cargo test {% for pkg in packages %} -p {{ pkg }} {% endfor %}"
    " {% for arg in args %} {{ arg | shell_quote }} {% endfor %}"
)
CARGO_NEXTEST_TEMPLATE = (
    "cargo nextest run {% for pkg in packages %} -p {{ pkg }} {% endfor %}"
    " {% for arg in args %} {{ arg | shell_quote }} {% endfor %}"
)
CARGO_BUILD_TEMPLATE = (
    "cargo build {% for pkg in packages %} -p {{ pkg }} {% endfor %}"
    " {% for arg in args %} {{ arg | shell_quote }} {% endfor %}"
)
CARGO_BENCH_TEMPLATE = (
    "cargo bench {% for pkg in packages %} -p {{ pkg }} {% endfor %}"
    " {% for arg in args %} {{ arg | shell_quote }} {% endfor %}"
)


class RunCommand(str, Enum):
    TEST = "test"  # cargo test
    NEXTEST = "nextest"  # cargo nextest run
    BUILD = "build"  # cargo build
    BENCH = "bench"  # cargo bench
    RUN = "run"  # -c で指定したテンプレート(未指定なら影響パッケージを表示するだけ)

    def __str__(self):
        return self.value

    def __repr__(self) -> str:
        return self.value

    def template(self, command: str = "") -> str:
        """サブコマンドに対応するコマンドテンプレートを返す(未確定なら空文字)"""
        if self is RunCommand.RUN:
            return command
        return BUILTIN_TEMPLATES[self]

    @staticmethod
    def get_description():
        description_list = ["影響を受けたパッケージに対して実行するコマンドを指定します。"]
        for i, sub_command in enumerate(RunCommand):
            description_list.append(f"  {i}: " + str(sub_command))
        return "\n".join(description_list)


BUILTIN_TEMPLATES = {
    RunCommand.TEST: CARGO_TEST_TEMPLATE,
    RunCommand.NEXTEST: CARGO_NEXTEST_TEMPLATE,
    RunCommand.BUILD: CARGO_BUILD_TEMPLATE,
    RunCommand.BENCH: CARGO_BENCH_TEMPLATE,
}


class PackageRecord(BaseModel):
    """マニフェストから読み込んだ生のパッケージ情報(ワークスペース外の依存もそのまま含む)"""

    name: str = Field(description="パッケージ名(ワークスペース内で一意)")
    manifest_path: str = Field(description="マニフェストファイル(Cargo.toml)の絶対パス")
    dependency_paths: list[str] = Field(default_factory=list, description="パス指定された依存先ディレクトリ")

    @classmethod
    def from_cargo_metadata(cls, package: dict[str, Any]) -> PackageRecord:
        # レジストリ由来の依存にはpathが無いのでここで落とす
        dependency_paths = [dep["path"] for dep in package.get("dependencies", []) if dep.get("path")]
        return cls(
            name=package["name"],
            manifest_path=package["manifest_path"],
            dependency_paths=dependency_paths,
        )


class AffectedParams(BaseModel):
    sub_command: RunCommand = Field(default=RunCommand.RUN, description="サブコマンド")
    input: str = Field(default="", description="対象のワークスペース(未指定ならカレントディレクトリ)")
    command: str = Field(default="", description="runサブコマンドで使うコマンドテンプレート")
    no_run: bool = Field(default=False, description="コマンドを生成して表示するだけで実行しない")
    base: str = Field(default=settings.base_revision, description="変更ファイルを取得する比較元リビジョン")
    extensions: list[str] = Field(default_factory=lambda: list(settings.extensions), description="対象の拡張子")
    args: list[str] = Field(default_factory=list, description="テンプレートのargs変数に渡す追加引数")
    verbose: bool = Field(default=False, description="影響範囲の詳細を表示")

    def get_template(self) -> str:
        return self.sub_command.template(self.command)
