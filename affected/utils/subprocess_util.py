import shlex
import subprocess
from typing import Any

from affected.utils.log_util import log


class SubprocessUtil:
    CompletedProcess = subprocess.CompletedProcess
    CalledProcessError = subprocess.CalledProcessError

    @staticmethod
    def quote(s: str | list[str]) -> str | list[str]:
        """
        文字列または文字列のリストをシェルコマンド用に安全にクオートします。

        引数:
            s (str | list[str]): クオートする文字列または文字列のリスト。

        戻り値:
            str | list[str]: クオートされた文字列または文字列のリスト。
        """
        if isinstance(s, list):
            return [shlex.quote(arg) for arg in s]
        return shlex.quote(s)

    @staticmethod
    def split(command: str) -> list[str]:
        """
        コマンド文字列をシェルと同じ規則(クオート、エスケープ)で引数のリストに分割します。

        引数:
            command (str): 分割するコマンド文字列。

        戻り値:
            list[str]: コマンド引数のリスト。

        例外:
            ValueError: クオートが閉じていない場合。
        """
        return shlex.split(command)

    @staticmethod
    def join(args: list[str]) -> str:
        """引数のリストを、splitで元に戻せる1行のコマンド文字列にします。"""
        return shlex.join(args)

    @staticmethod
    def run(
        args: str | list[str],
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        encoding: str = "utf-8",
        errors: str | None = None,
        timeout: float | None = None,
        *,  # ↑位置引数(args=とか省略可) ココから後はキーワード引数↓
        text: bool = True,
        capture_output: bool = False,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """
        サブプロセスでコマンドを実行します。

        capture_outputがFalseの場合、標準出力/標準エラーは呼び出し元のものをそのまま引き継ぎます。

        引数:
            args (str または list[str]): 実行するコマンド。
            cwd (Optional[str]): コマンドの作業ディレクトリ。
            env (Optional[Dict[str, str]]): 新しいプロセスの環境変数。
            timeout (Optional[float]): プロセスがtimeout秒後に終了しない場合、TimeoutExpired例外を発生させます。
            check (bool): Trueの場合、終了コードが0以外ならCalledProcessErrorを発生させます。
            capture_output (bool): Trueの場合、stdoutとstderrをキャプチャします。
            text (bool): Trueの場合、指定されたエンコーディングを使用してstdoutとstderrをデコードします。
            encoding (Optional[str]): テキストモード操作に使用するエンコーディング。
            errors (Optional[str]): デコード時のエラーハンドリング方式。

        戻り値:
            subprocess.CompletedProcess: CompletedProcessインスタンス。

        例外:
            subprocess.CalledProcessError: checkがTrueで、プロセスが非ゼロの終了ステータスを返した場合。
            OSError: 実行ファイルが見つからない、または実行権限がない場合。
        """
        kwargs: dict[str, Any] = {
            "args": args,
            "cwd": cwd,
            "env": env,
            "timeout": timeout,
            "capture_output": capture_output,
            "text": text,
            "encoding": encoding,
            "errors": errors,
        }

        # Remove None values to use default subprocess.run behavior
        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        log("run args=%s cwd=%s", args, cwd)

        # Avoid W1510: https://pylint.readthedocs.io/en/latest/user_guide/messages/warning/subprocess-run-check.html
        return subprocess.run(**kwargs, check=check)  # noqa: S603
