import pytest

from cryptomatrix.shared_kernel.primitives import CoinSymbol


def test_coin_symbol_normalizes_case_and_whitespace() -> None:
    assert CoinSymbol("  btc ").value == "BTC"
    assert str(CoinSymbol("eth")) == "ETH"


def test_coin_symbol_rejects_blank_and_multi_token_values() -> None:
    with pytest.raises(ValueError):
        CoinSymbol("   ")
    with pytest.raises(ValueError):
        CoinSymbol("BTC USDT")
    with pytest.raises(ValueError):
        CoinSymbol("BTC/USDT")


def test_coin_symbol_pair_symbol_concatenates_base_and_quote() -> None:
    assert CoinSymbol("btc").pair_symbol(CoinSymbol("usdt")) == "BTCUSDT"
