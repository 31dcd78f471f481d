from pop_courier.config.settings import POP3_PORT, POP3_TLS_PORT, Settings, get_settings

__all__ = ["POP3_PORT", "POP3_TLS_PORT", "Settings", "get_settings"]
