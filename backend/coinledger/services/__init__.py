"""Service-layer exports."""

from .accumulation import cancel_swing, close_swing, get_swing, list_swings, open_swing
from .alerts import (
    AlertOutcome,
    acknowledge_alert,
    dismiss_alert,
    execute_alert,
    get_alert,
    list_alerts,
    raise_alert,
)
from .ledger import get_transaction, list_transactions, record_buy, record_sell
from .market import latest_close, list_daily_prices, record_daily_price
from .opportunities import (
    Opportunity,
    check_buy_opportunity,
    check_sell_opportunity,
    evaluate_buy,
    evaluate_sell,
    scan_opportunities,
)
from .peaks import deactivate_peak, get_peak, observe_price
from .positions import Position, PositionSummary, Valuation, get_position, portfolio_summary
from .reference import (
    create_asset,
    create_exchange,
    get_asset,
    get_asset_by_symbol,
    get_exchange,
    list_assets,
    list_exchanges,
)
from .strategies import (
    deactivate_strategy,
    get_active_strategy,
    list_strategies,
    set_buy_strategy,
    set_sell_strategy,
)

__all__ = [
    "AlertOutcome",
    "Opportunity",
    "Position",
    "PositionSummary",
    "Valuation",
    "acknowledge_alert",
    "cancel_swing",
    "check_buy_opportunity",
    "check_sell_opportunity",
    "close_swing",
    "create_asset",
    "create_exchange",
    "deactivate_peak",
    "deactivate_strategy",
    "dismiss_alert",
    "evaluate_buy",
    "evaluate_sell",
    "execute_alert",
    "get_active_strategy",
    "get_alert",
    "get_asset",
    "get_asset_by_symbol",
    "get_exchange",
    "get_peak",
    "get_position",
    "get_swing",
    "get_transaction",
    "latest_close",
    "list_alerts",
    "list_assets",
    "list_daily_prices",
    "list_exchanges",
    "list_strategies",
    "list_swings",
    "list_transactions",
    "observe_price",
    "open_swing",
    "portfolio_summary",
    "raise_alert",
    "record_buy",
    "record_daily_price",
    "record_sell",
    "scan_opportunities",
    "set_buy_strategy",
    "set_sell_strategy",
]
