"""Player DNA: encrypted player skill registry with oracle-backed decryption."""

__version__ = "0.1.0"
