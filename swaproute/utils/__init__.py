from . import logging, time

__all__ = ["logging", "time"]
