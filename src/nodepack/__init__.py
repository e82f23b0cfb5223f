"""nodepack - Node.js buildpack compile step."""

__version__ = "0.1.0"
