## markwatch/alerts.py

from __future__ import annotations
import os, smtplib, requests
from email.mime.text import MIMEText
from .utils import logger


def send_email(subject: str, body: str):
    host = os.getenv("SMTP_HOST"); user = os.getenv("SMTP_USER"); pwd = os.getenv("SMTP_PASS")
    to_addr = os.getenv("ALERT_EMAIL_TO")
    if not all([host, user, pwd, to_addr]):
        return
    port = int(os.getenv("SMTP_PORT", "587"))
    msg = MIMEText(body)
    msg["Subject"] = f"[markwatch] {subject}"
    msg["From"] = user
    msg["To"] = to_addr
    with smtplib.SMTP(host, port, timeout=10) as s:
        s.starttls(); s.login(user, pwd); s.sendmail(user, [to_addr], msg.as_string())


def send_slack(text: str) -> bool:
    url = os.getenv("SLACK_WEBHOOK_URL")
    if not url: return False
    r = requests.post(url, json={"text": text}, timeout=5)
    r.raise_for_status()
    return True


def notify(subject: str, body: str, enabled: bool = True):
    """Send to every configured channel; delivery problems are only logged."""
    if not enabled:
        return
    try:
        send_email(subject, body)
        send_slack(f":rotating_light: markwatch {subject}: {body}")
    except (OSError, smtplib.SMTPException, requests.RequestException) as e:
        logger.warning(f"Alert delivery failed: {e}")
