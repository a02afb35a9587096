from dataclasses import dataclass, field
from pathlib import Path
from typing import TypedDict


@dataclass(frozen=True)
class Package:
    name: str
    directory: Path  # パッケージのルート(所有判定のキー)
    manifest: Path
    dependencies: frozenset[Path] = field(default_factory=frozenset)  # ワークスペース内の依存先ディレクトリ


class ChangeImpactResult(TypedDict):
    changed_files: list[Path]
    changed_paths: set[Path]
    affected_packages: list[str]
    excluded_packages: list[str]
