"""Trade Journal - personal trading journal with brokerage import inbox."""

__version__ = "0.1.0"
