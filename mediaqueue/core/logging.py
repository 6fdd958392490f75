"""Logging utilities for mediaqueue modules."""

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger that automatically inherits from root logger.
    
    Loggers obtained here work with basicConfig() without needing an
    explicit setup_logging() call:
    - Propagate to root logger (default behavior)
    - Only set a default level if root logger has no handlers
    
    Args:
        name: Logger name (e.g. 'mediaqueue.queue.scheduler')
        
    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    
    # basicConfig() not called yet
    root_logger = logging.getLogger()
    if not root_logger.handlers and logger.level == logging.NOTSET:
        logger.setLevel(logging.WARNING)
    
    return logger
