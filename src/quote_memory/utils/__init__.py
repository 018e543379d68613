"""Text matching, sampling and reply helpers."""
