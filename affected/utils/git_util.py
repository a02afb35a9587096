import os
from pathlib import Path

from affected import settings
from affected.schema.errors import ChangedFilesError
from affected.utils.log_util import log, log_i
from affected.utils.subprocess_util import SubprocessUtil


class GitUtil:
    @staticmethod
    def is_considered(path: str | Path, extensions: list[str] | None = None) -> bool:
        """ソースとして扱う拡張子かどうか(大文字小文字は区別しない)"""
        if extensions is None:
            extensions = settings.extensions
        ext = os.path.splitext(str(path))[1]
        if not ext:
            return False
        return ext[1:].lower() in {e.lstrip(".").lower() for e in extensions}

    @staticmethod
    def get_changed_files(
        root: Path, base: str = settings.base_revision, extensions: list[str] | None = None
    ) -> list[Path]:
        """
        baseとHEADの差分で変更されたファイルを取得します。

        引数:
            root: ワークスペースのルート(gitリポジトリのサブディレクトリでもよい)
            base: 比較元のリビジョン(デフォルトは直前のコミット)
            extensions: 対象とする拡張子

        戻り値:
            list[Path]: rootからの相対パス(拡張子でフィルタ済み, root外の変更は含まない)
        """
        # 削除されたファイルも名前が出るので、削除だけの変更でもパッケージは影響ありになる
        # --relative: rootからの相対パスにしてroot外の変更を除く, -z: 非ASCIIのパスをクォートさせない
        command = ["git", "diff", "--name-only", "--relative", "-z", base, "HEAD"]
        try:
            result = SubprocessUtil.run(command, cwd=str(root), capture_output=True, check=True)
        except SubprocessUtil.CalledProcessError as e:
            raise ChangedFilesError(
                f"`git diff` against `{base}` failed in `{root}`: {(e.stderr or '').strip()}",
                details={"root": str(root), "base": base},
            ) from e
        except OSError as e:
            raise ChangedFilesError(f"Could not run git: {e}", details={"root": str(root)}) from e

        changed_files = []
        for file_path in result.stdout.split("\0"):
            if not file_path:
                continue
            if GitUtil.is_considered(file_path, extensions):
                changed_files.append(Path(file_path))
            else:
                log("skip file_path=%s", file_path)

        log_i("Files changed since %s: %s", base, [str(f) for f in changed_files])
        return changed_files
