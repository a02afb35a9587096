from collections.abc import Iterable
from typing import Any

import jinja2
from jinja2 import meta

from affected.analyzer.package_graph.package_graph import PackageGraph
from affected.schema.errors import EmptyCommandError, TemplateError, UnsupportedVariableError
from affected.utils.log_util import log
from affected.utils.subprocess_util import SubprocessUtil

# テンプレートから参照できる変数(これ以外を参照したらエラー)
SUPPORTED_VARIABLES = ("packages", "excludes", "args")


def create_environment() -> jinja2.Environment:
    env = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)  # noqa: S701
    # {{ arg | shell_quote }} で空白入りの引数もsplit後に1トークンのまま残せる
    env.filters["shell_quote"] = SubprocessUtil.quote
    return env


class CommandTemplate:
    """
    packages/excludes/argsを参照するコマンドテンプレート

    例: "cargo test {% for pkg in packages %} -p {{ pkg }}{% endfor %}"
    render()で文字列に展開し、generate_command()でシェルと同じ規則で引数リストに分割する。
    ここではコマンドを組み立てるだけで実行はしない。
    """

    def __init__(self, template: str):
        self.source = template
        self.env = create_environment()
        try:
            self.ast = self.env.parse(template)
            self.template = self.env.from_string(template)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateError(
                f"Invalid command template (line {e.lineno}): {e.message}", details={"template": template}
            ) from e

    def variable_names(self) -> set[str]:
        """テンプレート内で参照されている(ループ変数などを除く)変数名"""
        return meta.find_undeclared_variables(self.ast)

    def bind_variables(
        self, package_graph: PackageGraph, included_packages: Iterable[str], args: list[str]
    ) -> dict[str, Any]:
        included = sorted(set(included_packages))
        variables: dict[str, Any] = {}
        for name in sorted(self.variable_names()):
            if name == "packages":
                variables["packages"] = included
            elif name == "excludes":
                variables["excludes"] = package_graph.exclude_list(included)
            elif name == "args":
                variables["args"] = list(args)
            else:
                raise UnsupportedVariableError(name)
        return variables

    def render(self, package_graph: PackageGraph, included_packages: Iterable[str], args: list[str]) -> str:
        variables = self.bind_variables(package_graph, included_packages, args)
        try:
            return self.template.render(**variables)
        except jinja2.TemplateError as e:
            raise TemplateError(f"Failed to render command template: {e}", details={"template": self.source}) from e

    def generate_command(
        self, package_graph: PackageGraph, included_packages: Iterable[str], args: list[str]
    ) -> list[str]:
        """テンプレートを展開して[プログラム名, 引数...]のリストにする"""
        rendered = self.render(package_graph, included_packages, args)
        log("rendered=%s", rendered)
        try:
            parts = SubprocessUtil.split(rendered)
        except ValueError as e:
            raise TemplateError(f"Could not split rendered command `{rendered}`: {e}") from e
        if not parts:
            raise EmptyCommandError(rendered)
        return parts


def generate_command(
    template: str, package_graph: PackageGraph, included_packages: Iterable[str], args: list[str]
) -> list[str]:
    return CommandTemplate(template).generate_command(package_graph, included_packages, args)
