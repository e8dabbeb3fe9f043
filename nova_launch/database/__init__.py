from .webhook_db import WebhookDatabase

__all__ = ['WebhookDatabase']
