"""Social networking backend: users, posts, follows, messaging and notifications."""

__version__ = "1.0.0"
