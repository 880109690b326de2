"""
Telegram front-end.
"""
