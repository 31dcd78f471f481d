"""Custom exceptions for pop-courier.

This module defines the exception hierarchy used throughout the
pop_courier package. Every failure is raised once at the point it is
detected and is never retried; callers should treat any of these as
fatal to the session that produced it.
"""


class PopCourierError(Exception):
    """Base exception for all pop-courier errors.

    All custom exceptions in the pop_courier package inherit from
    this class, allowing for broad exception catching when needed.

    Attributes:
        message: A human-readable description of the error.
    """

    def __init__(self, message: str = "An error occurred in pop-courier") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: A description of the error that occurred.
        """
        self.message = message
        super().__init__(self.message)


class ConfigurationError(PopCourierError):
    """Raised when there is an error in the configuration.

    This exception is raised when settings are missing, malformed,
    or contain invalid values.
    """

    def __init__(self, message: str = "Configuration error") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: A description of the configuration error.
        """
        super().__init__(message)


class TransportError(PopCourierError):
    """Raised when the underlying byte stream fails.

    Covers connect failures, read and write errors, and unexpected
    end of stream (see ConnectionClosedError).
    """

    def __init__(self, message: str = "Transport error") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: A description of the transport error.
        """
        super().__init__(message)


class ConnectionClosedError(TransportError):
    """Raised when the peer closed the stream or the session is closed.

    A graceful close is distinguishable from transient I/O failures
    by catching this subclass before TransportError.
    """

    def __init__(self, message: str = "Connection closed") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: A description of the close condition.
        """
        super().__init__(message)


class ProtocolError(PopCourierError):
    """Raised on a negative status reply or an unusable server line.

    Attributes:
        reply: The server's reason text after the status marker, or the
            raw line when it could not be classified. None when no line
            was involved.
    """

    def __init__(
        self,
        message: str = "Protocol error",
        reply: str | None = None,
    ) -> None:
        """Initialize the exception with an optional message and reply text.

        Args:
            message: A description of the protocol error.
            reply: The server text that triggered the error.
        """
        self.reply = reply
        super().__init__(message)


class AuthenticationError(ProtocolError):
    """Raised when the server rejects the USER/PASS exchange.

    Some servers accept both lines and only refuse on the next
    command, so this is also raised when the post-login NOOP fails.
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        reply: str | None = None,
    ) -> None:
        """Initialize the exception with an optional message and reply text.

        Args:
            message: A description of the authentication failure.
            reply: The server text that rejected the login.
        """
        super().__init__(message, reply=reply)


class ParseError(PopCourierError):
    """Raised when a reply or body line does not have the expected shape.

    Attributes:
        line: The offending line as received.
    """

    def __init__(self, message: str = "Parse error", line: str | None = None) -> None:
        """Initialize the exception with an optional message and line.

        Args:
            message: A description of the parse error.
            line: The line that could not be parsed.
        """
        self.line = line
        super().__init__(message)
