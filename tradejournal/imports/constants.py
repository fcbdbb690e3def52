"""Constants shared by the brokerage import pipeline."""

KRAKEN_DEFAULT_ACCOUNT_ID = "__kraken_default__"
KRAKEN_DEFAULT_ACCOUNT_FRIENDLY_NAME = "Kraken"

# IBKR fill-level rows; only order-level rows are imported
IBKR_FILL_TRANSACTION_TYPE = "ExchTrade"

KRAKEN_EQUITY_ASSET_CLASS = "equity_pair"