"""Patient registration, scheduling, prescriptions and billing for a small clinic."""

__version__ = "1.0.0"
