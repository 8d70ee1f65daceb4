"""Console logging setup for cloud-control."""

from cloud_control.logging.filters import StreamRoutingFilter
from cloud_control.logging.formatters import StreamFormatter

__all__ = ["StreamFormatter", "StreamRoutingFilter"]
