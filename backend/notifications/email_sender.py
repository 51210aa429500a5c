"""
Email delivery for routed tagmail reports.

Sends one message per routed group through SMTP, the Resend API, or a
local sendmail binary. Delivery runs in a child process the caller does
not wait for.
"""

import multiprocessing
import shlex
import smtplib
import subprocess
from email.message import EmailMessage
from email.utils import formatdate
from typing import List, Optional, Sequence

import resend

from models.report import RoutedGroup
from notifications.error_logger import log_routing_error
from notifications.errors import DeliveryError
from shared.config import Settings


def build_message(settings: Settings, host: str, recipients: Sequence[str], body: str) -> EmailMessage:
    """Build the report email for one routed group."""
    message = EmailMessage()
    message["From"] = settings.report_from
    message["Subject"] = _subject(host)
    message["To"] = ", ".join(recipients)
    message["Date"] = formatdate(localtime=True)
    message.set_content(body)
    return message


def _subject(host: str) -> str:
    return f"Puppet Report for {host}"


def send_via_smtp(groups: List[RoutedGroup], settings: Settings, host: str) -> None:
    """Send all groups over a single SMTP session."""
    with smtplib.SMTP(
        settings.smtp_server,
        settings.smtp_port,
        local_hostname=settings.smtp_helo,
        timeout=settings.smtp_timeout,
    ) as smtp:
        for group in groups:
            message = build_message(settings, host, group.recipients, group.body)
            smtp.send_message(message, from_addr=settings.report_from, to_addrs=list(group.recipients))


def send_via_resend(groups: List[RoutedGroup], settings: Settings, host: str) -> List[Optional[str]]:
    """
    Send all groups through the Resend API.

    Returns:
        Resend email IDs, one per group
    """
    resend.api_key = settings.resend_api_key

    email_ids = []
    for group in groups:
        response = resend.Emails.send({
            "from": settings.report_from,
            "to": list(group.recipients),
            "subject": _subject(host),
            "text": group.body,
        })
        email_ids.append(response.get("id"))
    return email_ids


def send_via_sendmail(groups: List[RoutedGroup], settings: Settings, host: str) -> None:
    """Pipe each group to its own sendmail process."""
    for group in groups:
        # sendmail takes the envelope recipients as arguments
        command = shlex.split(settings.sendmail) + list(group.recipients)
        message = build_message(settings, host, group.recipients, group.body)
        subprocess.run(
            command,
            input=message.as_bytes(),
            check=True,
            timeout=settings.smtp_timeout,
        )


def send_reports(groups: List[RoutedGroup], settings: Settings, host: str) -> str:
    """
    Deliver routed groups with the first configured transport.

    SMTP is used when a server is set, then Resend when an API key is set,
    then sendmail.

    Returns:
        Name of the transport used

    Raises:
        DeliveryError: If no transport is configured or sending fails
    """
    if settings.smtp_server != "none":
        transport, sender = "smtp", send_via_smtp
    elif settings.resend_api_key:
        transport, sender = "resend", send_via_resend
    elif settings.sendmail:
        transport, sender = "sendmail", send_via_sendmail
    else:
        raise DeliveryError("SMTP server is unset and could not find sendmail")

    try:
        sender(groups, settings, host)
    except Exception as e:
        message = f"Could not send report emails via {transport}: {e}"
        error_file = log_routing_error(
            "sending",
            e,
            context={
                "host": host,
                "transport": transport,
                "recipients": [" ".join(g.recipients) for g in groups],
            },
            log_dir=settings.log_dir,
        )
        print(f"  ✗ {message}. Details logged to: {error_file}")
        raise DeliveryError(message) from e

    print(f"  ✓ Sent {len(groups)} report(s) for {host} via {transport}")
    return transport


def dispatch_reports(
    groups: List[RoutedGroup], settings: Settings, host: str
) -> Optional[multiprocessing.Process]:
    """
    Start delivery in a child process and return without waiting for it.

    Children from earlier dispatches that have finished are reaped first.
    The child is not a daemon, so an exiting interpreter still waits for
    delivery to finish. Finished children linger only until the next dispatch.

    Returns:
        The started process, or None when there is nothing to send
    """
    if not groups:
        return None

    multiprocessing.active_children()

    process = multiprocessing.Process(
        target=send_reports,
        args=(list(groups), settings, host),
        name=f"tagmail-{host}",
    )
    process.start()
    return process
