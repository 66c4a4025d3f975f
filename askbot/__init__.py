"""Ask-anything site assistant: query understanding and retrieval-augmented answers."""

__version__ = "0.3.0"
