"""Observability for PDF Drive: structlog logging, Prometheus metrics, and
the per-request ``ObservabilityMiddleware``.

``create_app`` wires all three::

    configure_logging(settings.log_level, settings.log_format)
    app.add_middleware(ObservabilityMiddleware)
"""

from .logging import configure_logging, get_logger
from .metrics import metrics_text
from .middleware import ObservabilityMiddleware

__all__ = [
    "ObservabilityMiddleware",
    "configure_logging",
    "get_logger",
    "metrics_text",
]
