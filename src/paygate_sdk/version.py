"""Version information for PayGate Python SDK"""

__version__ = "0.1.0"
