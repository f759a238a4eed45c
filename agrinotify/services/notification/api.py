"""HTTP routes for the notification service.

`create_app` takes an already-built `NotificationService`; the process
entrypoint in `main.py` owns settings and background tasks.
"""

from contextlib import contextmanager
from dataclasses import asdict

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request

from agrinotify.common.logging import farmer_id_ctx
from agrinotify.common.metrics import metrics_response
from agrinotify.services.notification.channels.push import PushRequest
from agrinotify.services.notification.channels.sms import SmsRequest
from agrinotify.services.notification.router import SendNotificationParams
from agrinotify.services.notification.schemas import (
    DeviceRegisterRequest,
    DeviceUnregisterRequest,
    DispatchEventRequest,
    DispatchEventResponse,
    NotificationResultResponse,
    PreferencesResponse,
    PreferencesUpdateRequest,
    PushSendRequest,
    PushSendResponse,
    SendNotificationRequest,
    SmsSendRequest,
    SmsSendResponse,
    SmsStatsResponse,
    TemplatedSendRequest,
    TemplatedSendResponse,
)
from agrinotify.services.notification.service import NotificationService


routes = APIRouter()


def get_service(request: Request) -> NotificationService:
    return request.app.state.service


@contextmanager
def farmer_context(farmer_id: str):
    token = farmer_id_ctx.set(farmer_id)
    try:
        yield
    finally:
        farmer_id_ctx.reset(token)


async def bind_farmer(farmer_id: str):
    """Path dependency that tags log records with the farmer for the request."""

    with farmer_context(farmer_id):
        yield farmer_id


@routes.post("/notifications/send", response_model=NotificationResultResponse)
async def send_notification(req: SendNotificationRequest, service: NotificationService = Depends(get_service)):
    """Route one notification across SMS, push and the in-app inbox."""

    with farmer_context(req.farmer_id):
        result = await service.send_notification(SendNotificationParams(**req.model_dump()))
    return asdict(result)


@routes.post("/sms/send", response_model=SmsSendResponse)
async def send_sms(req: SmsSendRequest, service: NotificationService = Depends(get_service)):
    """Send one templated SMS directly; preferences are skipped, the quota is not."""

    with farmer_context(req.farmer_id):
        result = await service.send_sms(
            SmsRequest(
                farmer_id=req.farmer_id,
                phone=req.phone_number,
                template_key=req.template_key,
                params=req.variables,
                language=req.language,
            )
        )
    return asdict(result)


@routes.post("/push/send", response_model=PushSendResponse)
async def send_push(req: PushSendRequest, service: NotificationService = Depends(get_service)):
    """Push directly to every active device; high priority also ignores quiet hours."""

    with farmer_context(req.farmer_id):
        result = await service.send_push(
            PushRequest(
                farmer_id=req.farmer_id,
                type=req.type,
                title=req.title,
                body=req.body,
                deeplink=req.deeplink,
                metadata=req.data,
                high_priority=req.high_priority,
                bypass_quiet_hours=req.high_priority,
            )
        )
    return asdict(result)


@routes.post("/notifications/send-templated", response_model=TemplatedSendResponse)
async def send_templated(req: TemplatedSendRequest, service: NotificationService = Depends(get_service)):
    with farmer_context(req.farmer_id):
        results = await service.send_templated(
            req.farmer_id,
            req.template_type,
            list(req.channels),
            variables=req.variables,
            language=req.language,
            phone_number=req.phone_number,
            deeplink=req.deeplink,
        )
    return {"results": [asdict(result) for result in results]}


@routes.post("/events", response_model=DispatchEventResponse)
async def dispatch_event(req: DispatchEventRequest, service: NotificationService = Depends(get_service)):
    """Process an upstream event; `processed=false` for duplicates and rejects."""

    return {"processed": await service.dispatch_event(req.event_type, req.payload)}


@routes.get("/farmers/{farmer_id}/preferences", response_model=PreferencesResponse)
def get_preferences(farmer_id: str = Depends(bind_farmer), service: NotificationService = Depends(get_service)):
    return service.preferences.get_preferences(farmer_id)


@routes.put("/farmers/{farmer_id}/preferences", response_model=PreferencesResponse)
def update_preferences(
    req: PreferencesUpdateRequest,
    farmer_id: str = Depends(bind_farmer),
    service: NotificationService = Depends(get_service),
):
    try:
        return service.preferences.update_preferences(farmer_id, **req.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@routes.post("/farmers/{farmer_id}/devices", status_code=201)
def register_device(
    req: DeviceRegisterRequest,
    farmer_id: str = Depends(bind_farmer),
    service: NotificationService = Depends(get_service),
):
    row = service.device_tokens.register_token(farmer_id, req.token, req.device_type)
    return {"id": row.id, "token": row.token, "device_type": row.device_type, "is_active": row.is_active}


@routes.delete("/farmers/{farmer_id}/devices")
def unregister_device(
    req: DeviceUnregisterRequest,
    farmer_id: str = Depends(bind_farmer),
    service: NotificationService = Depends(get_service),
):
    if not service.device_tokens.unregister_token(farmer_id, req.token):
        raise HTTPException(status_code=404, detail="device token not found")
    return {"ok": True}


@routes.get("/farmers/{farmer_id}/notifications")
def list_notifications(
    farmer_id: str = Depends(bind_farmer),
    unread_only: bool = False,
    type: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    service: NotificationService = Depends(get_service),
):
    return service.inbox.list_for_farmer(farmer_id, unread_only=unread_only, type=type, page=page, limit=limit)


@routes.get("/farmers/{farmer_id}/notifications/unread-count")
def unread_count(farmer_id: str = Depends(bind_farmer), service: NotificationService = Depends(get_service)):
    return {"unread_count": service.inbox.unread_count(farmer_id)}


@routes.post("/farmers/{farmer_id}/notifications/read-all")
def mark_all_read(farmer_id: str = Depends(bind_farmer), service: NotificationService = Depends(get_service)):
    return {"updated": service.inbox.mark_all_read(farmer_id)}


@routes.post("/farmers/{farmer_id}/notifications/{notification_id}/read")
def mark_read(
    notification_id: str,
    farmer_id: str = Depends(bind_farmer),
    service: NotificationService = Depends(get_service),
):
    if not service.inbox.mark_read(notification_id, farmer_id):
        raise HTTPException(status_code=404, detail="notification not found")
    return {"ok": True}


@routes.delete("/farmers/{farmer_id}/notifications/{notification_id}")
def delete_notification(
    notification_id: str,
    farmer_id: str = Depends(bind_farmer),
    service: NotificationService = Depends(get_service),
):
    if not service.inbox.delete(notification_id, farmer_id):
        raise HTTPException(status_code=404, detail="notification not found")
    return {"ok": True}


@routes.get("/farmers/{farmer_id}/sms-stats", response_model=SmsStatsResponse)
def sms_stats(farmer_id: str = Depends(bind_farmer), service: NotificationService = Depends(get_service)):
    return service.sms.delivery_stats(farmer_id)


@routes.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}


@routes.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


def create_app(service: NotificationService, lifespan=None) -> FastAPI:
    app = FastAPI(title="Farmer Notification Service", lifespan=lifespan)
    app.state.service = service
    app.include_router(routes)
    return app
