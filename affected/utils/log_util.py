import functools
import inspect
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

import affected
from affected import settings

default_level = logging.INFO if settings.is_debug else logging.WARNING


# logging.Formatter のフォーマット指定子
#     %(name)s            ロガーの名前 (ロギングチャネル)
#     %(levelname)s       メッセージのテキストロギングレベル ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
#     %(asctime)s         LogRecord が作成された時刻のテキスト表現
#     %(process)d         プロセスID (利用可能な場合)
#     %(message)s         record.getMessage() の結果、レコードが発行される直前に計算される
# PidFunctionFormatter.format() によるフォーマット指定子
#     %(file_name)s       log関連を除いた呼び出し元のファイル名
#     %(function_name)s   log関連を除いた呼び出し元の関数名

FORMATTER_CONSOLE = "%(asctime)s - %(file_name)s - %(function_name)s - %(levelname)s - %(message)s"
FORMATTER_WITH_PID = "%(asctime)s - PID:%(process)d - %(file_name)s - %(function_name)s - %(levelname)s - %(message)s"


def get_logger(name: str, level: int = default_level, log_file: str = settings.log_file) -> logging.Logger:
    logger_ = logging.getLogger(name)
    logger_.setLevel(level)
    logger_.propagate = False
    if not logger_.handlers:
        _add_handler(logger_, level=level)
        if log_file:
            _add_file_handler(logger_, log_file=log_file, level=level)
    return logger_


# ロギング呼び出し関数を取るときに対象外とするソースファイルの名前部分
IGNORE_MODULES = ["__init__", "handlers", "log_util"]


class PidFunctionFormatter(logging.Formatter):
    def format(self, record):
        # デフォルトのfuncNameではlog_iなどの共通部分しか出ないため、呼び出し元の関数名を取得する
        record.file_name, record.function_name = self.get_function_name()
        return super().format(record)

    def get_function_name(self) -> tuple[str, str]:
        frame = inspect.currentframe()
        while frame:
            code = frame.f_code  # コードオブジェクトを取得
            filename = os.path.basename(code.co_filename)
            filename_without_ext = os.path.splitext(filename)[0]
            if filename_without_ext not in IGNORE_MODULES:
                return filename, code.co_name  # ファイル名と関数名を返す
            frame = frame.f_back
        return "unknown_file", "unknown_function"


def _add_handler(logger_: logging.Logger, level: int = default_level) -> None:
    # コンソール出力用のハンドラの設定(stdoutは結果出力用に空けておく)
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    formatter = PidFunctionFormatter(FORMATTER_CONSOLE)
    handler.setFormatter(formatter)
    logger_.addHandler(handler)


def _add_file_handler(logger_: logging.Logger, log_file: str, level: int = default_level) -> None:
    # ファイルハンドラの設定
    file_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5)  # 1MB, 最大5ファイル
    file_handler.setLevel(level)
    file_formatter = PidFunctionFormatter(FORMATTER_WITH_PID)
    file_handler.setFormatter(file_formatter)
    logger_.addHandler(file_handler)


logger = get_logger(affected.__name__)


def log_inout_debug(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f"Calling {func.__name__} with args: {args}, kwargs: {kwargs}")
        result = func(*args, **kwargs)
        logger.debug(f"{func.__name__} returned: {result}")
        return result

    return wrapper


def log(msg: str, *args, **kwargs):
    # IS_DEBUG か -v(set_debug_level) のどちらかで出力する
    if settings.is_debug or logger.isEnabledFor(logging.DEBUG):
        logger.info(msg, *args, **kwargs)


def log_e(msg: str, *args, **kwargs):
    logger.error(msg, *args, **kwargs)


def log_w(msg: str, *args, **kwargs):
    logger.warning(msg, *args, **kwargs)


def log_i(msg: str, *args, **kwargs):
    logger.info(msg, *args, **kwargs)


def log_d(msg: str, *args, **kwargs):
    logger.debug(msg, *args, **kwargs)


def set_debug_level() -> None:
    """-v指定時などに、以降のログをDEBUGレベルまで出力する"""
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG)
