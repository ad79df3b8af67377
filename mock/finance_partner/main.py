from datetime import datetime, timezone
from fastapi import FastAPI
import uuid

app = FastAPI(title="Mock Finance Partner", version="1.0.0")


def _reference(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/financing/orders")
def finance_order(payload: dict):
    return {
        "reference_id": _reference("FIN"),
        "message": "Order financing approved",
        "approved_at": datetime.now(timezone.utc).isoformat(),
    }

@app.post("/disbursements")
def disburse(payload: dict):
    return {"transaction_id": _reference("TRANS"), "order_id": payload.get("order_id")}
