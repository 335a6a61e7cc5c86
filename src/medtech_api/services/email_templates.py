"""HTML bodies for transactional emails."""

from __future__ import annotations

from datetime import datetime
from html import escape


def format_schedule_date(value: str) -> str:
    """Render an ISO date or datetime as a calendar date, else return it unchanged."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def welcome_email(name: str, link: str) -> tuple[str, str]:
    """Subject and body for a newly created technician."""
    subject = "Welcome! Set up your account."
    html = f"""
        <h1>Welcome, {escape(name)}!</h1>
        <p>An account has been created for you. Please set your password by clicking the link below:</p>
        <a href="{escape(link, quote=True)}">Set Password</a>
        <p>This link is valid for 1 hour.</p>
        <p>After setting your password, you can log in to the application.</p>
    """
    return subject, html


def reset_email(display_name: str | None, link: str) -> tuple[str, str]:
    """Subject and body for a re-sent password-set link."""
    subject = "Action Required: Set up your account."
    html = f"""
        <h1>Hi {escape(display_name or '')}!</h1>
        <p>Here is a new link to set your password. Please click the link below:</p>
        <a href="{escape(link, quote=True)}">Set Password</a>
        <p>This link is valid for 1 hour.</p>
    """
    return subject, html


def service_assignment_email(
    technician_name: str,
    device_name: str,
    scheduled_date: str,
) -> tuple[str, str]:
    """Subject and body for a new service task assignment."""
    subject = f"New Service Task Assigned: {device_name}"
    html = f"""
        <h1>New Service Task</h1>
        <p>Hello {escape(technician_name)},</p>
        <p>A new service task has been assigned to you for the device: <strong>{escape(device_name)}</strong>.</p>
        <p>The service is scheduled for: <strong>{escape(format_schedule_date(scheduled_date))}</strong>.</p>
        <p>Please log in to the dashboard to view the full details.</p>
        <p>Thank you,</p>
        <p>MedTech Administration</p>
    """
    return subject, html
