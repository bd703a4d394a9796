"""
Adapters package - External service connections.
Hosted backend (Supabase) and transactional email (SendGrid).
"""

from adapters import supabase_adapter, email_adapter

__all__ = [
    "supabase_adapter",
    "email_adapter",
]
