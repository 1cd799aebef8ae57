# HTTP Helper for Speaker Connections
# Session and SOAP request framing for the speakers' local UPnP interface

import aiohttp
import logging
from typing import Any, Dict, Tuple
from xml.sax.saxutils import escape as xml_escape

logger = logging.getLogger(__name__)

SOAP_ENVELOPE = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/" '
    's:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">'
    '<s:Body>{body}</s:Body>'
    '</s:Envelope>'
)

def create_speaker_session(timeout_seconds: float = 5) -> aiohttp.ClientSession:
    """
    Create an aiohttp session for one request batch against a speaker.
    Speakers only serve plain HTTP on the LAN and tolerate few parallel connections.
    """
    connector = aiohttp.TCPConnector(
        limit_per_host=2,
        ssl=False,
        force_close=True,
        enable_cleanup_closed=True
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout_seconds)
    )

def service_type(service: str) -> str:
    return f"urn:schemas-upnp-org:service:{service}:1"

def build_soap_request(service: str, action: str, params: Dict[str, Any]) -> Tuple[bytes, Dict[str, str]]:
    """Return (body, headers) for a SOAP action call; argument order follows params"""
    namespace = service_type(service)
    arguments = "".join(f"<{name}>{xml_escape(str(value))}</{name}>" for name, value in params.items())
    body = SOAP_ENVELOPE.format(body=f'<u:{action} xmlns:u="{namespace}">{arguments}</u:{action}>')

    headers = {
        'Content-Type': 'text/xml; charset="utf-8"',
        'SOAPACTION': f'"{namespace}#{action}"',
    }
    return body.encode('utf-8'), headers
