"""CLIエントリーポイント"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from .application import Providers, build_providers, build_session
from .features.geo.domain.models import Coordinate
from .features.gpx.services.file_exporter import write_artifact
from .features.notifications.domain.models import NotificationCode
from .features.search.domain.models import SearchField
from .features.selection.services.selection_state_machine import SelectionStateMachine
from .infrastructure.config.settings import Settings
from .shared.exceptions.errors import FileWriteError
from .shared.logging.config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """コマンドライン引数のパーサーを作成"""
    parser = argparse.ArgumentParser(
        description="2地点間の経路（または1地点）をGPSシミュレーター用のGPXファイルに出力"
    )

    parser.add_argument(
        "--start",
        type=str,
        required=True,
        help='出発地（"緯度,経度" または検索キーワード）',
    )

    parser.add_argument(
        "--end",
        type=str,
        help='目的地（"緯度,経度" または検索キーワード）。省略時は出発地のみのGPXを出力',
    )

    parser.add_argument(
        "--speed",
        type=float,
        help="シミュレーション速度（km/h、デフォルト: 設定値）",
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        default=".",
        help="出力先ディレクトリ（デフォルト: カレントディレクトリ）",
    )

    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="同名のファイルがあれば上書きする",
    )

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="環境変数ファイルのパス（デフォルト: .env）",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="ログレベル",
    )

    return parser


async def resolve_point(session: SelectionStateMachine, search_field: SearchField, text: str) -> bool:
    """
    座標文字列または検索キーワードから地点を設定

    Returns:
        bool: 地点を設定できた場合True
    """
    try:
        coordinate: Optional[Coordinate] = Coordinate.parse(text)
    except ValueError:
        coordinate = None

    if coordinate is not None:
        # 地図クリックと同じ扱い（出発地 → 目的地の順に埋まる）
        session.handle_map_click(coordinate)
        return coordinate in (session.state.start, session.state.end)

    session.on_text_changed(search_field, text)
    await session.drain()

    results = session.search.field(search_field).results
    if not results:
        logger.error(f"No search results for {search_field.value}: {text!r}")
        return False

    result = results[0]
    logger.info(f"Using first search result for {search_field.value}: {result.label()}")
    session.select_result(search_field, result)
    return True


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """
    GPXを生成して保存

    Returns:
        int: 終了コード（0: 成功, 1: 失敗）
    """
    providers = build_providers(settings)
    try:
        return await export(args, settings, providers)
    finally:
        providers.close()


async def export(args: argparse.Namespace, settings: Settings, providers: Providers) -> int:
    """地点を解決し、経路または単一地点のGPXを書き出す"""
    session = build_session(settings, providers)

    if args.speed is not None:
        session.set_simulation_speed(args.speed)

    if not await resolve_point(session, SearchField.START, args.start):
        return 1
    if args.end and not await resolve_point(session, SearchField.END, args.end):
        return 1

    # 逆ジオコーディングの完了を待ってから住所ラベルを使う
    await session.drain()

    if args.end:
        if not await session.calculate_route():
            return 1
        artifact = session.export_route()
    else:
        artifact = session.export_waypoint()

    if artifact is None:
        return 1

    try:
        path = write_artifact(artifact, Path(args.output_dir), overwrite=args.overwrite)
    except FileWriteError as e:
        session.notifications.error(NotificationCode.FILE_WRITE_FAILED, str(e))
        return 1

    print(path)
    return 0


def main() -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード（0: 成功, 1: 失敗, 130: 中断）
    """
    args = build_parser().parse_args()

    try:
        # 設定を読み込み
        settings = Settings(_env_file=args.env_file)

        # ログレベルを上書き
        if args.log_level:
            settings.log_level = args.log_level

        setup_logging(level=settings.log_level)

        logger.info("Starting GPX export")
        logger.info(f"Environment: {settings.environment}")

        exit_code = asyncio.run(run(args, settings))

        if exit_code == 0:
            logger.info("GPX export completed successfully")
        return exit_code

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # SIGINT
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
