"""Notification gating, fan-out and the webhook channels behind it."""
