import pytest

from wasm_tx.coins import Coin, Coins, parse_coins_normalized
from wasm_tx.errors import MalformedInputError


def test_duplicate_denominations_are_merged() -> None:
    coins = parse_coins_normalized("5stake,3stake")

    assert coins == Coins((Coin("stake", 8),))
    assert str(coins) == "8stake"


def test_empty_amount_is_an_empty_coin_set() -> None:
    assert parse_coins_normalized("") == Coins()
    assert parse_coins_normalized("   ") == Coins()
    assert not parse_coins_normalized(None)


def test_coins_are_sorted_by_denom() -> None:
    coins = parse_coins_normalized("10uwasm, 5stake")

    assert [coin.denom for coin in coins] == ["stake", "uwasm"]
    assert coins.amount_of("uwasm") == 10
    assert coins.is_valid()


def test_zero_and_fractional_amounts_are_normalized() -> None:
    coins = parse_coins_normalized("0stake,1.9uwasm")

    assert coins == Coins((Coin("uwasm", 1),))


def test_ibc_denoms_are_accepted() -> None:
    coins = parse_coins_normalized("7ibc/27394FB092D2ECCD56123C74F36E4C1F926001CEADA9CA97EA622B25F41E5EB2")

    assert len(coins) == 1
    assert coins.items[0].amount == 7


@pytest.mark.parametrize("raw", ["stake", "5", "5st", "-5stake", "5stake,", "5 stake 6"])
def test_malformed_coin_syntax_is_rejected(raw: str) -> None:
    with pytest.raises(MalformedInputError):
        parse_coins_normalized(raw)


def test_unsorted_coins_are_not_valid() -> None:
    coins = Coins((Coin("uwasm", 1), Coin("stake", 1)))

    assert not coins.is_valid()


def test_to_list_renders_string_amounts() -> None:
    assert parse_coins_normalized("100uwasm").to_list() == [{"denom": "uwasm", "amount": "100"}]
