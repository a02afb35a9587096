import os
from collections.abc import Iterator
from pathlib import Path

from affected.analyzer.package_graph.dependency_types import Package


class _TrieNode:
    __slots__ = ("children", "package")

    def __init__(self):
        self.children: dict[str, _TrieNode] = {}
        self.package: Package | None = None


class PathTrie:
    """
    ディレクトリパスをキーにしたプレフィックス木

    パスの構成要素(Path.parts)ごとにノードを持ち、任意のパスに対して
    最も深い(=最長一致の)祖先ディレクトリに登録されたPackageを返す。
    パッケージのディレクトリが入れ子になっていても最長一致を選ぶ。
    """

    def __init__(self):
        self._root = _TrieNode()
        self._size = 0

    @staticmethod
    def _parts(path: str | os.PathLike) -> tuple[str, ...]:
        return Path(os.path.normpath(os.fspath(path))).parts

    def insert(self, directory: str | os.PathLike, package: Package) -> None:
        """構築時のみ使用(同じディレクトリは後勝ち)"""
        node = self._root
        for part in self._parts(directory):
            node = node.children.setdefault(part, _TrieNode())
        if node.package is None:
            self._size += 1
        node.package = package

    def get(self, directory: str | os.PathLike) -> Package | None:
        """完全一致で取得"""
        node = self._root
        for part in self._parts(directory):
            node = node.children.get(part)
            if node is None:
                return None
        return node.package

    def lookup_owner(self, path: str | os.PathLike) -> Package | None:
        """pathを含む最長一致の祖先ディレクトリ(path自身を含む)のPackageを返す"""
        node = self._root
        owner = node.package
        for part in self._parts(path):
            node = node.children.get(part)
            if node is None:
                break
            if node.package is not None:
                owner = node.package
        return owner

    def items(self) -> Iterator[tuple[Path, Package]]:
        """(ディレクトリ, Package)をディレクトリ順に返す"""
        yield from self._walk(self._root, ())

    def values(self) -> Iterator[Package]:
        for _, package in self.items():
            yield package

    def _walk(self, node: _TrieNode, prefix: tuple[str, ...]) -> Iterator[tuple[Path, Package]]:
        if node.package is not None:
            yield Path(*prefix), node.package
        for part in sorted(node.children):
            yield from self._walk(node.children[part], (*prefix, part))

    def __contains__(self, directory: object) -> bool:
        if not isinstance(directory, (str, os.PathLike)):
            return False
        return self.get(directory) is not None

    def __iter__(self) -> Iterator[Path]:
        for directory, _ in self.items():
            yield directory

    def __len__(self) -> int:
        return self._size
