"""NeuroCalm: real-time heart-rate stress classification and alerting."""

__version__ = "0.1.0"
