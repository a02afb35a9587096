import unittest
import unittest.mock
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

from affected.analyzer.package_graph.package_graph import PackageGraph
from affected.schema.schema import PackageRecord
from affected.utils.subprocess_util import SubprocessUtil

# テスト用のワークスペース(ファイルシステムには触らない)
WORKSPACE_ROOT = Path("/workspace")


def create_record(name: str, rel_dir: str, deps: tuple[str, ...] = (), root: Path = WORKSPACE_ROOT) -> PackageRecord:
    # depsは root からの相対パス、または絶対パス(ワークスペース外の依存)
    dependency_paths = [dep if dep.startswith("/") else str(root / dep) for dep in deps]
    return PackageRecord(name=name, manifest_path=str(root / rel_dir / "Cargo.toml"), dependency_paths=dependency_paths)


def create_graph(records: list[PackageRecord], root: Path = WORKSPACE_ROOT) -> PackageGraph:
    package_graph = PackageGraph(root)
    package_graph.load_records(records)
    return package_graph


def completed_process(stdout: str = "", stderr: str = "", returncode: int = 0) -> SubprocessUtil.CompletedProcess:
    return SubprocessUtil.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class MockManager:
    """複数のモックをmock_nameという名前でアクセスできるようにするクラス"""

    def __init__(self):
        self.mock_dict: dict[str, MagicMock] = {}

    def _set_mock(self, mock_name: str, mock_target: str, return_value: Any = ""):
        # モックを生成してreturn_valueを設定
        self.mock_dict[mock_name] = self._parameterized_mock_factory(mock_target, return_value)

    def _parameterized_mock_factory(self, mock_target: str, return_value: Any):
        # モックを生成
        instance = MagicMock()
        instance.return_value = return_value
        patcher = patch(mock_target, instance)
        return patcher.start()

    def _get_mock(self, mock_name: str) -> None | MagicMock:
        # モックを取得
        if mock_name in self.mock_dict:
            return self.mock_dict[mock_name]
        return None

    def get_mock(self, mock_name: str) -> MagicMock:
        return self._get_mock(mock_name)

    def get_mock_call_count(self, mock_name: str):
        # モック呼び出しの回数を取得
        return self._get_mock(mock_name).call_count

    def set_mock_return_value(self, mock_target: str = "", mock_alias: str = "", return_value: Any = "") -> None:
        # モックをmock_dictから取り出すときの名前
        mock_name = mock_alias if mock_alias else mock_target
        if not mock_name:
            return

        # リターン値を書き換えるモックを設定
        mock = self._get_mock(mock_name)
        if mock:
            # 既存のモックに値だけ設定
            mock.return_value = return_value
        else:
            # 新規のモックを作成
            self._set_mock(mock_name, mock_target, return_value)

    def set_mock_side_effect(
        self, mock_target: str = "", mock_alias: str = "", side_effect: Any = lambda: None
    ) -> None:
        # サイドエフェクトを持つモックを設定
        mock_name = mock_alias if mock_alias else mock_target
        if mock_name and mock_name not in self.mock_dict:
            self._set_mock(mock_name, mock_target, 0)
        self.mock_dict[mock_name].side_effect = side_effect


class BaseTestCase(unittest.TestCase):
    def setUp(self):
        self.mock_manager = MockManager()

    def tearDown(self):
        # モックを停止
        patch.stopall()

    def get_mock(self, mock_name: str) -> MagicMock:
        return self.mock_manager.get_mock(mock_name)

    def check_mock_call_count(self, mock_name: str, expected_count: int):
        # モック呼び出しの回数をチェック
        self.assertEqual(self.mock_manager.get_mock_call_count(mock_name), expected_count, mock_name)

    def set_mock_return_value(self, mock_target: str = "", mock_alias: str = "", return_value: Any = ""):
        # リターン値を書き換えるモックを設定
        self.mock_manager.set_mock_return_value(
            mock_target=mock_target, mock_alias=mock_alias, return_value=return_value
        )

    def set_mock_side_effect(self, mock_target: str = "", mock_alias: str = "", side_effect: Any = lambda: None):
        # サイドエフェクトを持つモックを設定
        self.mock_manager.set_mock_side_effect(mock_target=mock_target, mock_alias=mock_alias, side_effect=side_effect)
