"""Alert ledger: persisted opportunities with a PENDING -> terminal lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.types import utc_now
from ..errors import InvalidStateError, NotFoundError
from ..models import AlertStatus, StrategyAlert, StrategyKind
from ..money import quantize_storage, require_positive, to_decimal
from .events import enqueue_ledger_event
from .locks import guarded_write
from .reference import get_asset
from .thresholds import buy_target_price, sell_target_price

logger = logging.getLogger(__name__)

_ALLOWED_FROM: dict[AlertStatus, frozenset[AlertStatus]] = {
    AlertStatus.ACKNOWLEDGED: frozenset({AlertStatus.PENDING}),
    AlertStatus.EXECUTED: frozenset({AlertStatus.PENDING, AlertStatus.ACKNOWLEDGED}),
    AlertStatus.DISMISSED: frozenset({AlertStatus.PENDING, AlertStatus.ACKNOWLEDGED}),
}

_STAMPS: dict[AlertStatus, str] = {
    AlertStatus.ACKNOWLEDGED: "acknowledged_at",
    AlertStatus.EXECUTED: "executed_at",
    AlertStatus.DISMISSED: "dismissed_at",
}


@dataclass(frozen=True)
class AlertOutcome:
    alert: StrategyAlert
    created: bool


async def find_pending_alert(
    session: AsyncSession, holder_id: str, asset_id: UUID, strategy_type: StrategyKind
) -> StrategyAlert | None:
    stmt = select(StrategyAlert).where(
        StrategyAlert.holder_id == holder_id,
        StrategyAlert.asset_id == asset_id,
        StrategyAlert.strategy_type == strategy_type,
        StrategyAlert.status == AlertStatus.PENDING,
    )
    return (await session.execute(stmt)).scalars().first()


async def raise_alert(
    session: AsyncSession,
    holder_id: str,
    asset_id: UUID,
    strategy_type: StrategyKind,
    trigger_price: Decimal | str,
    threshold_percent: Decimal | str,
    reference_price: Decimal | str,
) -> AlertOutcome:
    """Create a PENDING alert unless one is already pending for this asset and type."""

    trigger = require_positive(to_decimal(trigger_price, field="trigger_price"), "trigger_price")
    threshold = require_positive(to_decimal(threshold_percent, field="threshold_percent"), "threshold_percent")
    reference = require_positive(to_decimal(reference_price, field="reference_price"), "reference_price")
    if strategy_type is StrategyKind.SELL:
        target = sell_target_price(reference, threshold)
    else:
        target = buy_target_price(reference, threshold)
    asset = await get_asset(session, asset_id)

    async with guarded_write(session, holder_id, asset.id):
        existing = await find_pending_alert(session, holder_id, asset_id, strategy_type)
        if existing is not None:
            logger.debug(
                "Suppressed %s alert for asset %s: alert %s still pending", strategy_type.value, asset_id, existing.id
            )
            return AlertOutcome(alert=existing, created=False)
        alert = StrategyAlert(
            holder_id=holder_id,
            asset_id=asset_id,
            strategy_type=strategy_type,
            trigger_price=quantize_storage(trigger),
            threshold_percent=quantize_storage(threshold),
            reference_price=quantize_storage(reference),
            target_price=quantize_storage(target),
            status=AlertStatus.PENDING,
        )
        session.add(alert)
        await session.flush()
        await enqueue_ledger_event(
            session,
            holder_id,
            "ledger.alert.raised",
            {
                "alert_id": alert.id,
                "asset_id": asset_id,
                "strategy_type": strategy_type,
                "trigger_price": alert.trigger_price,
                "target_price": alert.target_price,
            },
        )
    logger.info(
        "Raised %s alert %s for asset %s at %s (target %s)",
        strategy_type.value,
        alert.id,
        asset_id,
        alert.trigger_price,
        alert.target_price,
    )
    return AlertOutcome(alert=alert, created=True)


async def get_alert(session: AsyncSession, holder_id: str, alert_id: UUID) -> StrategyAlert:
    alert = await session.get(StrategyAlert, alert_id)
    if alert is None or alert.holder_id != holder_id:
        raise NotFoundError("StrategyAlert", alert_id)
    return alert


async def _transition(session: AsyncSession, holder_id: str, alert_id: UUID, target: AlertStatus) -> StrategyAlert:
    alert = await get_alert(session, holder_id, alert_id)
    async with guarded_write(session, holder_id, alert.asset_id):
        await session.refresh(alert)
        if alert.status not in _ALLOWED_FROM[target]:
            raise InvalidStateError(
                f"Alert {alert.id} is {alert.status.value}; cannot move to {target.value}",
                alert_id=alert.id,
                status=alert.status,
            )
        previous = alert.status
        alert.status = target
        setattr(alert, _STAMPS[target], utc_now())
        await session.flush()
        await enqueue_ledger_event(
            session,
            holder_id,
            "ledger.alert.status_changed",
            {"alert_id": alert.id, "from": previous, "to": target},
        )
    logger.info("Alert %s moved %s -> %s", alert.id, previous.value, target.value)
    return alert


async def acknowledge_alert(session: AsyncSession, holder_id: str, alert_id: UUID) -> StrategyAlert:
    return await _transition(session, holder_id, alert_id, AlertStatus.ACKNOWLEDGED)


async def execute_alert(session: AsyncSession, holder_id: str, alert_id: UUID) -> StrategyAlert:
    return await _transition(session, holder_id, alert_id, AlertStatus.EXECUTED)


async def dismiss_alert(session: AsyncSession, holder_id: str, alert_id: UUID) -> StrategyAlert:
    return await _transition(session, holder_id, alert_id, AlertStatus.DISMISSED)


async def list_alerts(
    session: AsyncSession,
    holder_id: str,
    *,
    status: AlertStatus | None = AlertStatus.PENDING,
    asset_id: UUID | None = None,
) -> list[StrategyAlert]:
    stmt = select(StrategyAlert).where(StrategyAlert.holder_id == holder_id)
    if status is not None:
        stmt = stmt.where(StrategyAlert.status == status)
    if asset_id is not None:
        stmt = stmt.where(StrategyAlert.asset_id == asset_id)
    result = await session.execute(stmt.order_by(StrategyAlert.created_at.desc()))
    return list(result.scalars().all())


__all__ = [
    "AlertOutcome",
    "find_pending_alert",
    "raise_alert",
    "get_alert",
    "acknowledge_alert",
    "execute_alert",
    "dismiss_alert",
    "list_alerts",
]
