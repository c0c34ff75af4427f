from .logger import StructuredLogger, configure_logging, get_logger, log_operation

__all__ = ["StructuredLogger", "configure_logging", "get_logger", "log_operation"]
