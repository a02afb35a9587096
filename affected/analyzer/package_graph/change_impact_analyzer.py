from collections.abc import Iterable
from pathlib import Path

import networkx as nx

from affected.analyzer.package_graph.dependency_types import ChangeImpactResult
from affected.analyzer.package_graph.package_graph import PackageGraph
from affected.utils.log_util import log, log_inout_debug


class ChangeImpactAnalyzer:
    def __init__(self, package_graph: PackageGraph):
        self.graph = package_graph

    def seed(self, changed_files: Iterable[str | Path]) -> set[Path]:
        """変更ファイルを所有するパッケージのディレクトリを集める(どこにも属さないファイルは無視)"""
        changed_paths = set()
        for file in changed_files:
            file_path = self.graph.root / file  # 絶対パスならそのまま
            package = self.graph.lookup_owner(file_path)
            if package is None:
                log("no owner: %s", file_path)
                continue
            changed_paths.add(package.directory)
        return changed_paths

    @log_inout_debug
    def propagate(self, changed_paths: set[Path]) -> set[Path]:
        """依存元をたどって影響範囲を不動点まで広げる(循環があっても止まる)"""
        affected_paths = set(changed_paths)
        for directory in changed_paths:
            if directory in self.graph.nx_graph:
                affected_paths |= nx.descendants(self.graph.nx_graph, directory)
        return affected_paths

    def affected_names(self, affected_paths: Iterable[Path]) -> list[str]:
        names = set()
        for directory in affected_paths:
            package = self.graph.lookup_owner(directory)
            if package is not None:
                names.add(package.name)
        return sorted(names)

    def analyze_changes(self, changed_files: Iterable[str | Path]) -> ChangeImpactResult:
        """変更の影響範囲を分析"""
        changed_files = [Path(file) for file in changed_files]

        # 変更ファイルを直接含むパッケージ
        changed_paths = self.seed(changed_files)

        # それに(推移的に)依存するパッケージ
        affected_paths = self.propagate(changed_paths)
        affected_packages = self.affected_names(affected_paths)
        log("changed=%d affected=%d", len(changed_paths), len(affected_packages))

        return ChangeImpactResult(
            changed_files=changed_files,
            changed_paths=affected_paths,
            affected_packages=affected_packages,
            excluded_packages=self.graph.exclude_list(affected_packages),
        )
