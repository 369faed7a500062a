"""
Модуль: `utils/reset_delivery.py`.
Назначение: Доставка кода восстановления по email (HTTP API в стиле Resend или SMTP).
"""

import json
import smtplib
import ssl
import urllib.error
import urllib.request
from email.message import EmailMessage
from email.utils import parseaddr

from flask import current_app

RESET_EMAIL_SUBJECT = "Your Password Reset Code"


def build_reset_email(code: str, ttl_minutes: int) -> tuple[str, str]:
    """Возвращает (html, text) письма с кодом восстановления."""
    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
          <h1 style="color: #333; text-align: center;">Password Reset</h1>
          <p style="color: #666; text-align: center;">
            You requested to reset your password for CRAVINGS. Enter the following code in the app:
          </p>
          <div style="background: #f4f4f4; border-radius: 8px; padding: 30px; text-align: center; margin: 30px 0;">
            <span style="font-size: 36px; font-weight: bold; letter-spacing: 8px; color: #333;">{code}</span>
          </div>
          <p style="color: #999; text-align: center; font-size: 14px;">
            This code expires in {ttl_minutes} minutes. If you didn't request this, please ignore this email.
          </p>
        </div>
    """
    text = (
        "You requested to reset your password for CRAVINGS.\n"
        f"Your code: {code}\n\n"
        f"This code expires in {ttl_minutes} minutes. "
        "If you didn't request this, please ignore this email."
    )
    return html, text


def send_password_reset_code(email: str, code: str) -> bool:
    """Отправляет код на email выбранным транспортом. False при любой ошибке доставки."""
    cfg = current_app.config
    ttl_minutes = int(cfg.get("PASSWORD_RESET_CODE_TTL_MINUTES", 10))
    html, text = build_reset_email(code, ttl_minutes)
    message = {
        "from": cfg.get("MAIL_FROM", ""),
        "to": [email],
        "subject": RESET_EMAIL_SUBJECT,
        "html": html,
    }

    transport = cfg.get("EMAIL_TRANSPORT", "resend")
    if transport == "resend":
        return _send_via_http_api(message)
    if transport == "smtp":
        return _send_via_smtp(message, text)

    current_app.logger.error("Неизвестный почтовый транспорт: %s", transport)
    return False


def _send_via_http_api(message: dict) -> bool:
    """Служебная функция `_send_via_http_api`: POST {from, to, subject, html}."""
    cfg = current_app.config
    api_key = cfg.get("RESEND_API_KEY", "").strip()
    api_url = cfg.get("RESEND_API_URL", "").strip()
    if not api_key or not api_url:
        current_app.logger.error("RESEND_API_KEY is not configured")
        return False

    request = urllib.request.Request(
        api_url,
        data=json.dumps(message).encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        },
        method="POST",
    )
    timeout = int(cfg.get("EMAIL_API_TIMEOUT", 10))
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return 200 <= getattr(response, "status", 0) < 300
    except (urllib.error.URLError, TimeoutError):
        current_app.logger.exception("Не удалось отправить код восстановления на email: %s", message["to"][0])
        return False


def _send_via_smtp(message: dict, text: str) -> bool:
    """Служебная функция `_send_via_smtp`."""
    cfg = current_app.config
    host = cfg.get("SMTP_HOST", "").strip()
    sender = message["from"]
    if not host or not parseaddr(sender)[1]:
        current_app.logger.error("SMTP_HOST/MAIL_FROM is not configured")
        return False

    port = int(cfg.get("SMTP_PORT", 587))
    use_ssl = bool(cfg.get("SMTP_USE_SSL", False))
    use_tls = bool(cfg.get("SMTP_USE_TLS", True))
    username = cfg.get("SMTP_USER", "").strip()
    password = cfg.get("SMTP_PASSWORD", "")

    msg = EmailMessage()
    msg["Subject"] = message["subject"]
    msg["From"] = sender
    msg["To"] = ", ".join(message["to"])
    msg.set_content(text)
    msg.add_alternative(message["html"], subtype="html")

    try:
        if use_ssl:
            with smtplib.SMTP_SSL(host, port, timeout=10, context=ssl.create_default_context()) as client:
                if username:
                    client.login(username, password)
                client.send_message(msg)
        else:
            with smtplib.SMTP(host, port, timeout=10) as client:
                if use_tls:
                    client.starttls(context=ssl.create_default_context())
                if username:
                    client.login(username, password)
                client.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        current_app.logger.exception("Не удалось отправить код восстановления на email: %s", msg["To"])
        return False
