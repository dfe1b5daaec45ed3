"""Moderation thresholds."""

SPAM_THRESHOLD: int = 3
SPAM_WINDOW_SECONDS: int = 60 * 60

REPORT_BAN_THRESHOLD: int = 3

AUTO_BAN_DAYS: int = 7

SPAM_BAN_REASON: str = "Auto-banned for spam"
REPORT_BAN_REASON: str = "Auto-banned for multiple reports"
