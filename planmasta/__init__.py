"""HTTP relay for OpenAI chat completions and Replicate image generation."""

__version__ = "0.1.0"