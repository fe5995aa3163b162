"""
Base fee projection.

EIP-1559 lets the base fee rise by at most 12.5% per block.
"""

BASE_FEE_MAX_CHANGE_NUMERATOR = 1125
BASE_FEE_MAX_CHANGE_DENOMINATOR = 1000


def get_max_base_fee_in_future_block(base_fee: int, blocks_in_future: int) -> int:
    """
    Calculate the maximum base fee reachable in a future block.

    Args:
        base_fee: Current base fee in wei
        blocks_in_future: Number of blocks ahead

    Returns:
        Upper bound of the base fee after that many blocks
    """
    max_base_fee = int(base_fee)
    for _ in range(blocks_in_future):
        max_base_fee = max_base_fee * BASE_FEE_MAX_CHANGE_NUMERATOR // BASE_FEE_MAX_CHANGE_DENOMINATOR + 1
    return max_base_fee
