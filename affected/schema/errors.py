from typing import Any


class AffectedError(Exception):
    """affected全体の基底例外(cli.pyでまとめて捕捉して終了コードに変換する)"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# ワークスペース探索(マニフェスト読み込み)の例外
class WorkspaceError(AffectedError):
    pass


# 変更ファイル取得(git)の例外
class ChangedFilesError(AffectedError):
    pass


# コマンドテンプレートの例外
class TemplateError(AffectedError):
    pass


class UnsupportedVariableError(TemplateError):
    def __init__(self, variable_name: str):
        self.variable_name = variable_name
        super().__init__(f"Unsupported variable `{variable_name}`", details={"variable": variable_name})


class EmptyCommandError(TemplateError):
    def __init__(self, rendered: str = ""):
        super().__init__("No program name", details={"rendered": rendered})
