"""
Order e-mails: a summary for the shop owner and a confirmation for the
customer. Both go through Django's mail backend; errors propagate to the
caller (the outbox dispatcher), which records them.
"""
import logging

from django.conf import settings
from django.core.mail import EmailMessage, get_connection
from django.utils import timezone

logger = logging.getLogger(__name__)

RULE = "-" * 40


def _money(amount) -> str:
    return f"PKR {amount:,.2f}"


def _items_list(order) -> str:
    return "\n".join(
        f"- {item.product.name} ({item.product.color}) x {item.quantity} = {_money(item.line_total)}"
        for item in order.items.all()
    )


def build_business_message(order) -> str:
    lines = [
        f"New Order Received - {order.order_number}",
        RULE,
        "",
        "Customer Details:",
        f"Name: {order.customer_name}",
        f"Phone: {order.customer_phone}",
        f"Email: {order.customer_email or 'N/A'}",
        f"Address: {order.delivery_address}",
        f"City: {order.city}",
        "",
        "Order Details:",
        _items_list(order),
        "",
        f"Total Amount: {_money(order.total_amount)}",
        f"Payment Method: {order.payment_method}",
    ]
    if order.notes:
        lines += ["", f"Notes: {order.notes}"]
    lines += [
        "",
        f"Order placed on: {timezone.localtime(order.created_at):%Y-%m-%d %H:%M}",
        RULE,
        "Please confirm this order by contacting the customer.",
    ]
    return "\n".join(lines)


def build_customer_message(order) -> str:
    contact = []
    if settings.BUSINESS_WHATSAPP:
        contact.append(f"WhatsApp: {settings.BUSINESS_WHATSAPP}")
    if settings.BUSINESS_EMAIL:
        contact.append(f"Email: {settings.BUSINESS_EMAIL}")

    lines = [
        f"Dear {order.customer_name},",
        "",
        f"Thank you for your order with {settings.BUSINESS_NAME}!",
        "",
        f"Your Order Number: {order.order_number}",
        f"Total Amount: {_money(order.total_amount)}",
        "Payment Method: Cash on Delivery (COD)",
        "",
        "Order Summary:",
        _items_list(order),
        "",
        "Delivery Address:",
        order.delivery_address,
        order.city,
        "",
        "We will contact you shortly to confirm your order.",
    ]
    if contact:
        lines += ["", "For any queries, please contact us:", *contact]
    lines += ["", "Best regards,", f"{settings.BUSINESS_NAME} Team"]
    return "\n".join(lines)


def send_order_confirmation(order) -> int:
    messages = []
    if settings.BUSINESS_EMAIL:
        messages.append(EmailMessage(
            subject=f"New Order: {order.order_number}",
            body=build_business_message(order),
            to=[settings.BUSINESS_EMAIL],
        ))
    if order.customer_email:
        messages.append(EmailMessage(
            subject=f"Order Confirmation - {order.order_number}",
            body=build_customer_message(order),
            to=[order.customer_email],
        ))
    if not messages:
        return 0

    with get_connection(fail_silently=False) as connection:
        sent = connection.send_messages(messages)
    logger.info(f"order confirmation sent for {order.order_number} ({sent} message(s))")
    return sent
