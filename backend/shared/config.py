"""Runtime settings for tagmail report processing."""

import os
import shutil
import socket

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_TAGMAP = "/etc/puppet/tagmail.conf"


class Settings(BaseModel):
    """Explicit configuration passed to the processor and mail transports."""

    tagmap: str = DEFAULT_TAGMAP
    smtp_server: str = "none"
    smtp_port: int = Field(25, ge=1, le=65535)
    smtp_helo: str = "localhost"
    smtp_timeout: float = Field(30.0, gt=0)
    report_from: str = "report@localhost"
    sendmail: str = ""
    resend_api_key: str | None = None
    log_dir: str | None = None


def load_settings() -> Settings:
    """Build settings from environment variables (and .env, if present)."""
    fqdn = socket.getfqdn()
    return Settings(
        tagmap=os.getenv("TAGMAIL_TAGMAP", DEFAULT_TAGMAP),
        smtp_server=os.getenv("TAGMAIL_SMTP_SERVER", "none"),
        smtp_port=int(os.getenv("TAGMAIL_SMTP_PORT", "25")),
        smtp_helo=os.getenv("TAGMAIL_SMTP_HELO", fqdn),
        smtp_timeout=float(os.getenv("TAGMAIL_SMTP_TIMEOUT", "30")),
        report_from=os.getenv("TAGMAIL_REPORT_FROM", f"report@{fqdn}"),
        sendmail=os.getenv("TAGMAIL_SENDMAIL", shutil.which("sendmail") or ""),
        resend_api_key=os.getenv("RESEND_API_KEY") or None,
        log_dir=os.getenv("TAGMAIL_LOG_DIR") or None,
    )
