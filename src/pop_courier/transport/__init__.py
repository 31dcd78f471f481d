"""Transport layer for pop-courier.

- LineTransport: line framing over a buffered duplex byte stream
- open_connection: TCP/TLS connect returning a LineTransport
"""

from pop_courier.transport.line_transport import LineTransport, open_connection

__all__ = ["LineTransport", "open_connection"]
