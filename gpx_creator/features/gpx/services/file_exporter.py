"""GPXファイルの書き出し"""
from pathlib import Path

from ....shared.exceptions.errors import FileWriteError
from ....shared.logging.config import get_logger
from ....shared.utils.text import to_filename_part
from .gpx_serializer import ExportArtifact

logger = get_logger(__name__)

GPX_EXTENSION = ".gpx"


def write_artifact(artifact: ExportArtifact, directory: Path, overwrite: bool = False) -> Path:
    """
    GPXをファイルに保存

    Args:
        artifact: GPX本文と推奨ファイル名
        directory: 保存先ディレクトリ（存在しなければ作成）
        overwrite: 既存ファイルを上書きするか

    Returns:
        Path: 保存したファイルのパス

    Raises:
        FileWriteError: 書き込みに失敗した場合、または上書き禁止で既存ファイルがある場合
    """
    # 保存先は常に directory 直下
    filename = to_filename_part(artifact.suggested_filename) or "export"
    path = Path(directory) / f"{filename}{GPX_EXTENSION}"

    if path.exists() and not overwrite:
        raise FileWriteError(f"File already exists: {path}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(artifact.content, encoding="utf-8")
    except OSError as e:
        raise FileWriteError(f"Failed to write {path}: {e}") from e

    logger.info(f"GPX saved: {path}")
    return path
