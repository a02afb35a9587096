import os
from collections.abc import Iterable
from pathlib import Path

import networkx as nx

from affected.analyzer.package_graph.dependency_types import Package
from affected.analyzer.package_graph.path_trie import PathTrie
from affected.schema.schema import PackageRecord
from affected.utils.log_util import log, log_d, log_w


class PackageGraph:
    """
    ワークスペース内のパッケージと依存関係を保持するグラフ

    nx_graphのエッジは「依存先 -> 依存元」の向き(変更が伝搬する向き)で張る。
    ノードはパッケージのディレクトリ。
    """

    def __init__(self, workspace_root: Path):
        self.root = Path(os.path.normpath(workspace_root))
        self.packages = PathTrie()
        self.nx_graph = nx.DiGraph()

    def scan_workspace(self) -> None:
        """ワークスペース全体をスキャンしてグラフを構築(マニフェスト形式ごとにサブクラスで実装)"""
        raise NotImplementedError

    def load_records(self, records: Iterable[PackageRecord]) -> None:
        """生のパッケージ情報からPackageを構築してグラフに登録"""
        for record in records:
            package = self._create_package(record)
            if package.directory in self.packages:
                replaced = self.packages.get(package.directory)
                log_w("duplicate package directory: %s replaces %s", package.name, replaced.name)
            self.packages.insert(package.directory, package)
            self.nx_graph.add_node(package.directory)
            log("package=%s directory=%s", package.name, package.directory)

        # 全パッケージの登録完了後に依存先を解決する(依存先が後から出てくることがあるため)
        for package in self.packages.values():
            self._add_dependency_edges(package)

    def _create_package(self, record: PackageRecord) -> Package:
        manifest = Path(os.path.normpath(record.manifest_path))
        # ワークスペース外の依存は今回の差分で変わりようがないので、名前ではなくパスで除外する
        dep_paths = [Path(os.path.normpath(dep_path)) for dep_path in record.dependency_paths]
        dependencies = frozenset(dep_path for dep_path in dep_paths if self._is_in_workspace(dep_path))
        return Package(name=record.name, directory=manifest.parent, manifest=manifest, dependencies=dependencies)

    def _is_in_workspace(self, path: Path) -> bool:
        return path.is_relative_to(self.root)

    def _add_dependency_edges(self, package: Package) -> None:
        for dep_path in package.dependencies:
            # サブディレクトリを指す依存もあるので完全一致ではなく最長一致で解決する
            dependency = self.packages.lookup_owner(dep_path)
            if dependency is None:
                log_d("unresolved dependency: %s -> %s", package.name, dep_path)
                continue
            if dependency.directory == package.directory:
                continue
            self.nx_graph.add_edge(dependency.directory, package.directory)

    def lookup_owner(self, path: Path) -> Package | None:
        return self.packages.lookup_owner(path)

    def get_package(self, directory: Path) -> Package | None:
        return self.packages.get(directory)

    def package_list(self) -> list[Package]:
        """ディレクトリ順のパッケージ一覧"""
        return list(self.packages.values())

    def package_names(self) -> list[str]:
        return sorted({package.name for package in self.packages.values()})

    def dependents_of(self, directory: Path) -> set[Path]:
        """directoryのパッケージに直接依存しているパッケージのディレクトリ"""
        if directory not in self.nx_graph:
            return set()
        return set(self.nx_graph.successors(directory))

    def exclude_list(self, included_names: Iterable[str]) -> list[str]:
        """included_namesに含まれないパッケージ名(ソート済み)"""
        included = set(included_names)
        return [name for name in self.package_names() if name not in included]

    def __len__(self) -> int:
        return len(self.packages)
