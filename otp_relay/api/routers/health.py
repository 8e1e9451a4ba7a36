from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
async def health(request: Request):
    # configured == credentials present; providers are not called from here
    handlers = request.app.state.dispatch_handlers
    providers = {name: h.provider.enabled for name, h in handlers.items()}
    status = "ok" if all(providers.values()) else "degraded"
    return {
        "status": status,
        "providers": providers,
    }

@router.get("/liveness")
async def liveness():
    return {"alive": True}
