"""UIForge agent service: chat requests in, whitelisted UI code out."""

__version__ = "0.1.0"
