import asyncio
from dataclasses import replace

from checkout_backend.notifications import OrderEmail, dispatch, send_order_emails


def _capture_sends(monkeypatch, fail_for=()):
    sent = []

    def _fake_send_email(message, *, to, sender, api_key):
        if to in fail_for:
            raise RuntimeError("resend down")
        sent.append({"to": to, "from": sender, "subject": message.subject, "api_key": api_key})
        return {"id": "email_1"}

    monkeypatch.setattr("checkout_backend.notifications.mailer.send_email", _fake_send_email)
    return sent


def test_dispatch_without_api_key_is_a_noop(monkeypatch, settings):
    sent = _capture_sends(monkeypatch)
    message = OrderEmail(subject="s", html="<p>h</p>")

    count = asyncio.run(dispatch(message, replace(settings, resend_api_key=""), customer_address="a@example.com", internal_address="b@example.com"))

    assert count == 0
    assert sent == []


def test_dispatch_sends_customer_then_internal(monkeypatch, settings):
    sent = _capture_sends(monkeypatch)
    customer = OrderEmail(subject="customer", html="c")
    internal = OrderEmail(subject="internal", html="i")

    count = asyncio.run(dispatch(customer, settings, customer_address="a@example.com", internal_message=internal, internal_address="team@shop.example"))

    assert count == 2
    assert [(s["to"], s["subject"]) for s in sent] == [("a@example.com", "customer"), ("team@shop.example", "internal")]
    assert all(s["from"] == "orders@shop.example" for s in sent)


def test_dispatch_skips_missing_addresses(monkeypatch, settings):
    sent = _capture_sends(monkeypatch)
    count = asyncio.run(dispatch(OrderEmail(subject="s", html="h"), settings, customer_address="", internal_address=None))
    assert count == 0
    assert sent == []


def test_dispatch_failure_does_not_stop_other_send(monkeypatch, settings):
    sent = _capture_sends(monkeypatch, fail_for=("a@example.com",))
    count = asyncio.run(dispatch(OrderEmail(subject="s", html="h"), settings, customer_address="a@example.com", internal_address="team@shop.example"))
    assert count == 1
    assert [s["to"] for s in sent] == ["team@shop.example"]


def test_send_order_emails_renders_both_messages(monkeypatch, settings, completed_session):
    sent = _capture_sends(monkeypatch)

    count = asyncio.run(send_order_emails(completed_session, settings))

    assert count == 2
    customer, internal = sent
    assert customer["to"] == "buyer@example.com"
    assert customer["subject"] == "J.HINTON Order Confirmed — $52.95"
    assert internal["to"] == "team@shop.example"
    assert internal["subject"] == "[INTERNAL] J.HINTON Order Confirmed — $52.95"


def test_send_email_calls_resend(monkeypatch):
    from checkout_backend.notifications import mailer

    calls = []
    monkeypatch.setattr(mailer.resend.Emails, "send", lambda params: calls.append(params) or {"id": "e_1"})

    result = mailer.send_email(OrderEmail(subject="Hi", html="<p>x</p>"), to="a@example.com", sender="o@shop.example", api_key="re_1")

    assert result == {"id": "e_1"}
    assert calls == [{"from": "o@shop.example", "to": ["a@example.com"], "subject": "Hi", "html": "<p>x</p>"}]
    assert mailer.resend.api_key == "re_1"
