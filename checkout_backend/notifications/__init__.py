"""
Module 'notifications': rendu et envoi des confirmations de commande.
"""

from .models import CompletedSessionRecord, OrderEmail, PurchasedLine, ShippingAddress
from .render import format_amount, render_order_email
from .mailer import dispatch, send_order_emails

__all__ = [
    "CompletedSessionRecord",
    "OrderEmail",
    "PurchasedLine",
    "ShippingAddress",
    "format_amount",
    "render_order_email",
    "dispatch",
    "send_order_emails",
]
