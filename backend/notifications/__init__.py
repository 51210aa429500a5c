"""
Notification system for tagmail reports.

This module handles:
- Parsing tagmap rules (recipients plus tag predicates)
- Matching run log records against those rules
- Rendering one report body per matched rule
- Sending the reports by email without blocking the caller
"""

from .errors import DeliveryError, MalformedRuleError, RenderError
from .report_renderer import render_report
from .rule_matcher import route
from .tag_parser import parse_tagmap
from .email_sender import dispatch_reports, send_reports

__all__ = [
    'DeliveryError',
    'MalformedRuleError',
    'RenderError',
    'dispatch_reports',
    'parse_tagmap',
    'render_report',
    'route',
    'send_reports',
]
