"""Gateway between authenticated clients and n8n workflow webhooks."""

__version__ = "1.0.0"
