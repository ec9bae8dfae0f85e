"""funcall-server: chat server dispatching LLM function calls to Python capabilities.

This package provides a REST API and SSE streaming interface that turns a user
message into zero or more capability calls and a final model-composed reply.
"""

from funcall_server.app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
