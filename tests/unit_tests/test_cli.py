import tempfile
from pathlib import Path

from affected import cli
from affected.schema.schema import AffectedParams, RunCommand
from tests.unit_tests.analyzer.test_package_graph_cargo import create_metadata
from tests.unit_tests.helper import BaseTestCase, completed_process

# モック用の定義
# 1. モジュールのインポート方法に応じたモックの定義(bb.xxを置き換える例):
#    a. from import文を使用する場合:
#       例: cc.pyで「from aa import bb」としてbb.xxを使用する場合
#       MOCK_DEFINITION = "cc.bb.xx" <= "aa.bb.xx"ではない
#    b. クラスのstaticmethodを置き換える場合はクラス定義側を指定する
ALL_MOCK_GET_CHANGED_FILES = "affected.utils.git_util.GitUtil.get_changed_files"
ALL_MOCK_LOAD_METADATA = "affected.analyzer.package_graph.cargo.package_graph_cargo.PackageGraphCargo._load_metadata"
ALL_MOCK_DISPLAY_MESSAGE = "affected.cli.display_message"
ALL_MOCK_DISPLAY_COMMAND = "affected.cli.display_command"
ALL_MOCK_DISPLAY_ERROR = "affected.cli.display_error"
MOCK_SUBPROCESS_RUN = "affected.utils.subprocess_util.SubprocessUtil.run"


class TestCli(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name).resolve()
        # app -> core
        self.set_mock_return_value(ALL_MOCK_LOAD_METADATA, return_value=create_metadata(self.root))
        self.set_mock_return_value(ALL_MOCK_GET_CHANGED_FILES, return_value=[Path("core/src/lib.rs")])
        self.set_mock_return_value(ALL_MOCK_DISPLAY_MESSAGE)
        self.set_mock_return_value(ALL_MOCK_DISPLAY_COMMAND)
        self.set_mock_return_value(ALL_MOCK_DISPLAY_ERROR)

    def tearDown(self):
        super().tearDown()
        self.temp_dir.cleanup()

    def create_params(self, **kwargs) -> AffectedParams:
        return AffectedParams(input=str(self.root), **kwargs)

    # =============  main_exec(テンプレートなし)  ==============

    def test_main_exec_prints_packages(self):
        result = cli.main_exec(self.create_params())
        self.assertEqual(result, 0)
        self.get_mock(ALL_MOCK_DISPLAY_MESSAGE).assert_called_once_with("-p app -p core")

    def test_main_exec_no_packages(self):
        self.set_mock_return_value(ALL_MOCK_GET_CHANGED_FILES, return_value=[Path("README.rs")])
        result = cli.main_exec(self.create_params())
        self.assertEqual(result, 0)
        self.get_mock(ALL_MOCK_DISPLAY_MESSAGE).assert_called_once_with(cli.NO_PACKAGES_MESSAGE)

    # =============  main_exec(テンプレートあり)  ==============

    def test_main_exec_no_run(self):
        self.set_mock_return_value(MOCK_SUBPROCESS_RUN)
        params = self.create_params(sub_command=RunCommand.TEST, no_run=True, args=["--", "--nocapture"])
        result = cli.main_exec(params)
        self.assertEqual(result, 0)
        self.get_mock(ALL_MOCK_DISPLAY_COMMAND).assert_called_once_with(
            ["cargo", "test", "-p", "app", "-p", "core", "--", "--nocapture"]
        )
        self.check_mock_call_count(MOCK_SUBPROCESS_RUN, 0)

    def test_main_exec_runs_command_and_propagates_status(self):
        self.set_mock_return_value(MOCK_SUBPROCESS_RUN, return_value=completed_process(returncode=3))
        params = self.create_params(command="echo {% for pkg in excludes %}{{ pkg }}{% endfor %} done")
        result = cli.main_exec(params)
        self.assertEqual(result, 3)
        args, kwargs = self.get_mock(MOCK_SUBPROCESS_RUN).call_args
        self.assertEqual(args[0], ["echo", "done"])
        self.assertEqual(kwargs["cwd"], str(self.root))
        self.assertFalse(kwargs["check"])

    def test_main_exec_unsupported_variable(self):
        self.set_mock_return_value(MOCK_SUBPROCESS_RUN)
        result = cli.main_exec(self.create_params(command="cargo test {{ unknown }}"))
        self.assertEqual(result, 1)
        self.check_mock_call_count(MOCK_SUBPROCESS_RUN, 0)
        message = self.get_mock(ALL_MOCK_DISPLAY_ERROR).call_args[0][0]
        self.assertIn("unknown", message)

    def test_main_exec_missing_executable(self):
        self.set_mock_side_effect(MOCK_SUBPROCESS_RUN, side_effect=FileNotFoundError(2, "No such file", "nope"))
        result = cli.main_exec(self.create_params(command="nope {{ packages | join(' ') }}"))
        self.assertEqual(result, 1)
        message = self.get_mock(ALL_MOCK_DISPLAY_ERROR).call_args[0][0]
        self.assertIn("nope", message)

    # =============  main(引数解析)  ==============

    def test_main_run_subcommand(self):
        with self.assertRaises(SystemExit) as cm:
            cli.main(["run", "-i", str(self.root)])
        self.assertEqual(cm.exception.code, 0)
        self.get_mock(ALL_MOCK_DISPLAY_MESSAGE).assert_called_once_with("-p app -p core")

    def test_main_build_with_trailing_args(self):
        with self.assertRaises(SystemExit) as cm:
            cli.main(["build", "-i", str(self.root), "--no-run", "--", "--release"])
        self.assertEqual(cm.exception.code, 0)
        self.get_mock(ALL_MOCK_DISPLAY_COMMAND).assert_called_once_with(
            ["cargo", "build", "-p", "app", "-p", "core", "--release"]
        )

    def test_main_passes_base_and_extensions(self):
        with self.assertRaises(SystemExit):
            cli.main(["run", "-i", str(self.root), "--base", "main", "--ext", ".PY", "--ext", "rs"])
        args, _ = self.get_mock(ALL_MOCK_GET_CHANGED_FILES).call_args
        self.assertEqual(args, (self.root, "main", ["py", "rs"]))

    def test_main_without_subcommand(self):
        with self.assertRaises(SystemExit) as cm:
            cli.main([])
        self.assertEqual(cm.exception.code, 1)

    def test_create_params_strips_separator(self):
        parser = cli.create_parser()
        args = parser.parse_args(["test", "--", "--ignored"])
        params = cli.create_params(args)
        self.assertEqual(params.sub_command, RunCommand.TEST)
        self.assertEqual(params.args, ["--ignored"])
        self.assertEqual(params.command, "")

    def test_create_params_keeps_inner_separator(self):
        # cargo testにテストバイナリ用の引数を渡すには2つ目の "--" が必要
        parser = cli.create_parser()
        params = cli.create_params(parser.parse_args(["test", "--", "--", "--nocapture"]))
        self.assertEqual(params.args, ["--", "--nocapture"])

    def test_main_test_with_binary_args(self):
        with self.assertRaises(SystemExit) as cm:
            cli.main(["test", "-i", str(self.root), "--no-run", "--", "--", "--nocapture"])
        self.assertEqual(cm.exception.code, 0)
        self.get_mock(ALL_MOCK_DISPLAY_COMMAND).assert_called_once_with(
            ["cargo", "test", "-p", "app", "-p", "core", "--", "--nocapture"]
        )

