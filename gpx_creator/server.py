"""HTTPサーバー（FastAPI）"""
from typing import Any, Optional
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from .application import Providers, build_providers, build_session
from .features.geo.domain.models import Coordinate, MapRegion
from .features.gpx.services.gpx_serializer import ExportArtifact
from .features.notifications.domain.models import NotificationType
from .features.search.domain.models import SearchField
from .features.selection.services.selection_state_machine import SelectionStateMachine
from .infrastructure.config.settings import Settings
from .shared.exceptions.errors import SearchFailedError, ValidationError
from .shared.logging.config import get_logger, setup_logging

logger = get_logger(__name__)

GPX_MEDIA_TYPE = "application/gpx+xml"


class CoordinateModel(BaseModel):
    """リクエストの座標"""

    latitude: float = Field(..., ge=-90.0, le=90.0, description="緯度")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="経度")

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class RouteExportRequest(BaseModel):
    """経路GPXの出力リクエスト"""

    start: CoordinateModel
    end: CoordinateModel
    speed_kmh: Optional[float] = Field(default=None, description="シミュレーション速度（km/h）")
    start_label: Optional[str] = Field(default=None, description="出発地の住所（省略時は逆ジオコーディング）")
    end_label: Optional[str] = Field(default=None, description="目的地の住所（省略時は逆ジオコーディング）")


class WaypointExportRequest(BaseModel):
    """単一地点GPXの出力リクエスト"""

    point: CoordinateModel
    label: Optional[str] = Field(default=None, description="地点名（省略時は逆ジオコーディング）")


def create_app(settings: Optional[Settings] = None, providers: Optional[Providers] = None) -> FastAPI:
    """
    FastAPIアプリケーションを作成

    Args:
        settings: アプリケーション設定（Noneの場合は環境変数から読み込み）
        providers: 共有するプロバイダー（Noneの場合は最初のリクエストで生成）
    """
    settings = settings or Settings()

    app = FastAPI(
        title="GPX Creator",
        description="2地点間の経路をGPSシミュレーター用のGPXとして出力するサービス",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.providers = providers

    def get_providers() -> Providers:
        if app.state.providers is None:
            app.state.providers = build_providers(settings)
        return app.state.providers

    def new_session() -> SelectionStateMachine:
        return build_session(settings, get_providers())

    @app.on_event("startup")
    async def startup_event() -> None:
        """起動時の処理"""
        logger.info("Application starting up")
        logger.info(f"Environment: {settings.environment}")
        logger.info(f"Directions backend: {settings.directions_backend}")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        """終了時の処理"""
        if app.state.providers is not None:
            app.state.providers.close()
        logger.info("Application shut down")

    @app.get("/")
    async def root() -> dict[str, Any]:
        """ルートエンドポイント"""
        return {
            "service": "GPX Creator",
            "version": "1.0.0",
            "status": "running",
            "environment": settings.environment,
        }

    @app.get("/health")
    async def health() -> dict[str, str]:
        """ヘルスチェックエンドポイント"""
        return {"status": "healthy"}

    @app.get("/search")
    async def search(
        q: str = Query(..., min_length=1, description="検索キーワード"),
        lat: Optional[float] = Query(default=None, ge=-90.0, le=90.0, description="検索を寄せる中心の緯度"),
        lon: Optional[float] = Query(default=None, ge=-180.0, le=180.0, description="検索を寄せる中心の経度"),
    ) -> dict[str, Any]:
        """
        場所を検索

        lat/lon を指定した場合はその周辺に検索を寄せる
        """
        region = None
        if lat is not None and lon is not None:
            span = settings.search_bias_span_degrees
            region = MapRegion(
                center=Coordinate(latitude=lat, longitude=lon),
                latitude_delta=span,
                longitude_delta=span,
            )

        try:
            results = await get_providers().search.search(q, region)
        except SearchFailedError as e:
            logger.warning(f"Search failed for {q!r}: {e}")
            raise HTTPException(status_code=502, detail="Search failed")

        limit = settings.search_result_limit
        return {
            "query": q,
            "truncated": len(results) >= limit,
            "results": [
                {
                    "label": r.label(),
                    "subtitle": r.subtitle,
                    "latitude": r.coordinate.latitude,
                    "longitude": r.coordinate.longitude,
                }
                for r in results[:limit]
            ],
        }

    @app.post("/export/route")
    async def export_route(request: RouteExportRequest) -> Response:
        """2地点間の経路を計算し、経路GPXを返す"""
        session = new_session()
        if request.speed_kmh is not None:
            session.set_simulation_speed(request.speed_kmh)

        try:
            session.set_start(request.start.to_coordinate())
            session.set_end(request.end.to_coordinate())
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        await session.drain()
        _apply_label(session, SearchField.START, request.start_label)
        _apply_label(session, SearchField.END, request.end_label)

        if not await session.calculate_route():
            raise _blocked(session, default_status=502)
        return _gpx_response(session.export_route(), session)

    @app.post("/export/waypoint")
    async def export_waypoint(request: WaypointExportRequest) -> Response:
        """1地点のGPXを返す"""
        session = new_session()

        try:
            session.set_start(request.point.to_coordinate())
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        await session.drain()
        _apply_label(session, SearchField.START, request.label)

        return _gpx_response(session.export_waypoint(), session)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """グローバル例外ハンドラー"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error", "detail": str(exc)},
        )

    return app


def _apply_label(session: SelectionStateMachine, search_field: SearchField, label: Optional[str]) -> None:
    if label:
        session.search.write_programmatically(search_field, label)


def _blocked(session: SelectionStateMachine, default_status: int = 400) -> HTTPException:
    # 警告（入力不足）は400、エラー（外部サービス失敗）は default_status
    notification = session.notifications.latest()
    if notification is None:
        return HTTPException(status_code=default_status, detail="Request could not be processed")
    status = 400 if notification.notification_type == NotificationType.WARNING else default_status
    return HTTPException(status_code=status, detail=notification.message)


def _gpx_response(artifact: Optional[ExportArtifact], session: SelectionStateMachine) -> Response:
    if artifact is None:
        raise _blocked(session)
    return Response(
        content=artifact.content,
        media_type=GPX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(artifact.suggested_filename)}.gpx"},
    )


if __name__ == "__main__":
    import uvicorn

    server_settings = Settings()
    setup_logging(level=server_settings.log_level)

    uvicorn.run(
        create_app(server_settings),
        host="0.0.0.0",
        port=server_settings.port,
        log_level=server_settings.log_level.lower(),
    )
