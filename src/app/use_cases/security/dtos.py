"""
Security Use Case DTOs
"""

from pydantic import BaseModel


class ForceLogoutResponse(BaseModel):
    """
    Outcome of a security change that ends every session.

    The client clears its local auth state when force_logout is set.
    """

    message: str
    message_key: str
    force_logout: bool = True
