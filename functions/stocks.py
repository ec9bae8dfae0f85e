"""Mock stock price lookup."""

from pydantic import BaseModel, Field

from funcall_server.capabilities import Capability

MOCK_PRICES = {
    "AAPL": "$150.00",
    "GOOGL": "$2800.00",
    "MSFT": "$300.00",
}


class StockPriceArgs(BaseModel):
    ticker: str = Field(min_length=1)


def get_stock_price(ticker: str) -> str:
    """Return the (mock) current price for *ticker*."""
    price = MOCK_PRICES.get(ticker.upper(), "Data not available")
    return f"Stock price for {ticker}: {price}"


def register():
    return Capability(
        name="get_stock_price",
        handler=get_stock_price,
        args_model=StockPriceArgs,
        description="Mock stock price lookup",
    )
