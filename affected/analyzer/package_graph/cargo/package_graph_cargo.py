import json
import os
from pathlib import Path
from typing import Any

from affected.analyzer.package_graph.package_graph import PackageGraph
from affected.schema.errors import WorkspaceError
from affected.schema.schema import PackageRecord
from affected.utils.log_util import log
from affected.utils.subprocess_util import SubprocessUtil

CARGO_METADATA_COMMAND = ["cargo", "metadata", "--format-version", "1", "--no-deps"]


class PackageGraphCargo(PackageGraph):
    def __init__(self, workspace_root: Path):
        super().__init__(workspace_root)

    def scan_workspace(self) -> None:
        """cargo metadataからワークスペースメンバーを読み込んでグラフを構築"""
        metadata = self._load_metadata()
        records = self._extract_records(metadata)
        log("workspace_root=%s members=%d", metadata.get("workspace_root"), len(records))
        self.load_records(records)

    def _load_metadata(self) -> dict[str, Any]:
        if not os.path.isdir(self.root):
            raise WorkspaceError(f"Workspace root `{self.root}` is not a directory", details={"root": str(self.root)})

        try:
            result = SubprocessUtil.run(CARGO_METADATA_COMMAND, cwd=str(self.root), capture_output=True, check=True)
        except SubprocessUtil.CalledProcessError as e:
            raise WorkspaceError(
                f"`cargo metadata` failed in `{self.root}`: {(e.stderr or '').strip()}",
                details={"root": str(self.root), "returncode": e.returncode},
            ) from e
        except OSError as e:
            raise WorkspaceError(f"Could not run `cargo metadata`: {e}", details={"root": str(self.root)}) from e

        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise WorkspaceError(f"Invalid `cargo metadata` output: {e}", details={"root": str(self.root)}) from e

    def _extract_records(self, metadata: dict[str, Any]) -> list[PackageRecord]:
        # --no-deps でもワークスペース外のpath依存が混ざることがあるのでメンバーだけに絞る
        members = set(metadata.get("workspace_members", []))
        try:
            return [
                PackageRecord.from_cargo_metadata(package)
                for package in metadata["packages"]
                if not members or package["id"] in members
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise WorkspaceError(f"Malformed `cargo metadata` output: {e}", details={"root": str(self.root)}) from e
