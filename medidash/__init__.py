"""Monthly revenue reporting for Medibill practitioners."""

__version__ = "0.1.0"
