import json
import logging
from flask import has_request_context, request

audit_logger = logging.getLogger("loginguard.audit")


def log_event(action: str, user_id=None, ip=None, metadata=None):
    user_agent = None
    if has_request_context():
        ip = ip or request.remote_addr
        user_agent = (request.headers.get("User-Agent") or "")[:255] or None

    audit_logger.info(
        "%s %s",
        action,
        json.dumps(
            {"user_id": user_id, "ip": ip, "user_agent": user_agent, "metadata": metadata or {}},
            sort_keys=True,
            default=str,
        ),
    )
