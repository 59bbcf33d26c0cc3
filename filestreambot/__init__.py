"""HTTP streaming server, link helpers and support code for files kept in a Telegram log channel."""

__version__ = "3.1.0"