"""Page objects for the demo store."""

from .dashboard import Dashboard
from .login_page import LoginPage

__all__ = ["Dashboard", "LoginPage"]
