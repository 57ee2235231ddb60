"""HTML rendering of an order record as an invoice page."""

from __future__ import annotations

import datetime
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .formatting import fmt_long_date, fmt_money, fmt_qty, safe_float

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
TEMPLATE_DIR = os.path.join(_PACKAGE_DIR, "templates")
SAMPLE_ORDER_PATH = os.path.join(_PACKAGE_DIR, "sample_order.json")

LOGO_CDN = "https://cdn.tfgmedia.co.za/Communication/BrandFormat"
BASH_FORMAT_CODES = frozenset(
    {
        "100", "101", "102", "105", "106", "107", "109", "110", "112", "113",
        "117", "118", "119", "122", "126", "128", "129", "130", "131", "132",
        "133", "138", "144", "146", "148", "150",
    }
)

ADDRESS_TYPE_COLLECTION = 4
ADDRESS_TYPE_DELIVER_2_ME = 5


class OrderValidationError(ValueError):
    """Raised when an order cannot be rendered."""


@dataclass
class ItemGroup:
    brand: str
    pos_transaction_number: str
    format_code: str
    items: List[Dict[str, Any]] = field(default_factory=list)
    is_first: bool = False

    @property
    def logo_url(self) -> str:
        return brand_logo_url(self.format_code)


def brand_logo_url(format_code: Any) -> str:
    code = str(format_code or "")
    if code in BASH_FORMAT_CODES:
        return f"{LOGO_CDN}/Bash/{code}/{code}_logo.png"
    return f"{LOGO_CDN}/{code}/{code}_logo.png"


def delivery_label(address_type_id: Any) -> str:
    if address_type_id == ADDRESS_TYPE_COLLECTION:
        return "Collection details:"
    if address_type_id == ADDRESS_TYPE_DELIVER_2_ME:
        return "Deliver 2 Me:"
    return "Delivery details:"


def validate_order(order: Any) -> Dict[str, Any]:
    if not isinstance(order, dict):
        raise OrderValidationError("Order must be a JSON object.")

    summaries = order.get("DeliverySummary")
    if not isinstance(summaries, list) or not summaries:
        raise OrderValidationError("'DeliverySummary' must be a non-empty array.")
    for index, summary in enumerate(summaries):
        if not isinstance(summary, dict) or not isinstance(summary.get("OrderItems"), list):
            raise OrderValidationError(f"DeliverySummary[{index}] must contain an 'OrderItems' array.")
        for item_index, item in enumerate(summary["OrderItems"]):
            if not isinstance(item, dict):
                raise OrderValidationError(
                    f"DeliverySummary[{index}].OrderItems[{item_index}] must be an object."
                )
        details = summary.get("DeliveryDetails")
        if details is None:
            continue
        if not isinstance(details, dict):
            raise OrderValidationError(f"DeliverySummary[{index}].DeliveryDetails must be an object.")
        address = details.get("Address")
        if address is not None and not isinstance(address, dict):
            raise OrderValidationError(
                f"DeliverySummary[{index}].DeliveryDetails.Address must be an object."
            )

    if not isinstance(order.get("PaymentDetails"), dict):
        raise OrderValidationError("'PaymentDetails' must be an object.")
    return order


def group_items(order: Dict[str, Any]) -> List[ItemGroup]:
    """Group every order line by brand and POS transaction, in first-seen order."""
    groups: Dict[Tuple[str, str], ItemGroup] = {}
    for summary in order.get("DeliverySummary", []):
        for item in summary.get("OrderItems", []):
            key = (str(item.get("ProductBrand", "")), str(item.get("POS_TransactionNumber", "")))
            group = groups.get(key)
            if group is None:
                group = ItemGroup(
                    brand=key[0],
                    pos_transaction_number=key[1],
                    format_code=str(item.get("ProductBrandFormatCode", "")),
                    is_first=not groups,
                )
                groups[key] = group
            group.items.append(item)
    return list(groups.values())


def load_sample_order() -> Dict[str, Any]:
    with open(SAMPLE_ORDER_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["money"] = fmt_money
    env.filters["long_date"] = fmt_long_date
    env.filters["qty"] = fmt_qty
    env.filters["amount"] = safe_float
    return env


_ENVIRONMENT: Optional[Environment] = None


def get_environment() -> Environment:
    global _ENVIRONMENT
    if _ENVIRONMENT is None:
        _ENVIRONMENT = _build_environment()
    return _ENVIRONMENT


def render_invoice_html(order: Any, today: Optional[datetime.date] = None) -> str:
    order = validate_order(order)
    first_delivery = order["DeliverySummary"][0]
    delivery_details = first_delivery.get("DeliveryDetails") or {}
    address = delivery_details.get("Address") or {}
    first_items = first_delivery["OrderItems"]
    payment = order["PaymentDetails"]

    today = today or datetime.date.today()
    template = get_environment().get_template("invoice.html")
    return template.render(
        order=order,
        payment=payment,
        payment_lines=payment.get("PaymentInformation") or [],
        groups=group_items(order),
        invoice_title=first_items[0].get("POS_TransactionNumber", "") if first_items else "",
        address=address,
        address_type_id=address.get("AddressTypeId"),
        delivery_label=delivery_label(address.get("AddressTypeId")),
        contact_cellphone=delivery_details.get("ContactCellphone", ""),
        invoice_date=f"{today.day:02d} {today.strftime('%B %Y')}",
        is_begc=bool(order.get("IsBeGC")),
    )
