import os
from os.path import dirname, join

from dotenv import load_dotenv

load_dotenv(verbose=True)

dotenv_path = join(dirname(__file__), ".env")
load_dotenv(dotenv_path)


# git(変更ファイル取得の比較元リビジョン)
base_revision = os.getenv("AFFECTED_BASE_REVISION", "HEAD~1")

# extensions(変更ファイルとして扱う拡張子)
default_extensions = ["rs", "c", "cpp", "h", "hpp", "cc", "cxx", "toml"]
extensions_env = os.getenv("AFFECTED_EXTENSIONS", "")
if extensions_env:
    extensions = [ext.strip().lstrip(".").lower() for ext in extensions_env.split(",") if ext.strip()]
else:
    extensions = default_extensions

# log(空白ならファイルには出力しない)
log_file = os.getenv("AFFECTED_LOG_FILE", "")

# mode
is_debug = os.getenv("IS_DEBUG", "False").lower() in ("true", "1", "t")  # デバッグモード(例: IS_DEBUG=True)
