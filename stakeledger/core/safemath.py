from stakeproto.types.common import MAX_UINT256, ArithmeticOverflow, ArithmeticUnderflow


def checked_add(a: int, b: int, limit: int = MAX_UINT256) -> int:
    result = a + b
    if result > limit:
        raise ArithmeticOverflow(f"{a} + {b} exceeds {limit}")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticUnderflow(f"{a} - {b} is negative")
    return a - b
