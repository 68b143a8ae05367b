"""Email job payloads.

Jobs are consumed by the external email worker; the field names match its
template placeholders.
"""

from typing import Any

from src.bo_binary.domain.models import BinaryOrder
from src.bo_common.decimals import format_amount
from src.bo_common.enums import BinaryOrderStatus
from src.bo_notification.domain.models import Recipient

BINARY_ORDER_RESULT = "BinaryOrderResult"


def signed_result_amount(order: BinaryOrder) -> str:
    """What the user got back, signed: +stake+profit, -stake, or 0."""
    if order.status == BinaryOrderStatus.WIN:
        return f"+{format_amount(order.amount + order.profit)}"
    if order.status == BinaryOrderStatus.LOSS:
        return f"-{format_amount(order.amount)}"
    return "0"


def binary_order_result_job(recipient: Recipient, order: BinaryOrder) -> dict[str, Any]:
    return {
        "emailType": BINARY_ORDER_RESULT,
        "emailData": {
            "TO": recipient.email,
            "FIRSTNAME": recipient.first_name or "",
            "ORDER_ID": order.id,
            "RESULT": order.status,
            "MARKET": order.symbol,
            "CURRENCY": order.quote_currency,
            "AMOUNT": format_amount(order.amount),
            "PROFIT": signed_result_amount(order),
            "ENTRY_PRICE": format_amount(order.price),
            "CLOSE_PRICE": (
                format_amount(order.close_price) if order.close_price is not None else None
            ),
            "SIDE": order.side,
        },
    }
