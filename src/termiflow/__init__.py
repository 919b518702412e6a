"""termiflow - 话题订阅与 AI 策展."""

__version__ = "0.1.0"
