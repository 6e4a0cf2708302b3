from typing import Optional

from fastapi import Request

UNKNOWN_ADDRESS = "unknown"


def extract_client_ip(request: Request) -> str:
    """
    Resolve the caller's address.

    Order: first hop of X-Forwarded-For, then X-Real-IP, then the socket
    peer. Falls back to "unknown".
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_ADDRESS


def extract_user_agent(request: Request) -> Optional[str]:
    user_agent = request.headers.get("user-agent")
    return user_agent[:512] if user_agent else None
