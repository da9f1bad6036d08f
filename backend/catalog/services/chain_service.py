"""
Coffee Catalog Backend: Chain Lookup Service
==============================================

What:  Maps supported EVM chain ids to their names.
How:   `parse_chain_id` validates the raw path value, `get_chain_name`
       resolves a validated id.
Who:   GET /chains/{chain_id}.
"""

import re
from enum import IntEnum

from catalog.exceptions import ValidationError


class ChainId(IntEnum):
    ETHEREUM = 1
    OPTIMISM = 10
    BSC = 56
    POLYGON = 137
    FANTOM = 250
    ARBITRUM = 42161
    AVALANCHE = 43114


# Leading integer, the rest of the value is ignored ("10abc" -> 10)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ChainService:
    def parse_chain_id(self, value: str) -> ChainId:
        """
        Validate a raw chain id. Only its leading integer counts, so "137" and
        "137abc" both resolve to POLYGON.

        Raises:
            ValidationError: value does not start with an integer, or names an
                unsupported chain.
        """
        match = _LEADING_INT.match(value or "")
        if match is None:
            raise ValidationError(message=f"{value} is not a valid chainId", field="chainId")
        number = int(match.group(1))

        try:
            return ChainId(number)
        except ValueError:
            raise ValidationError(message=f"{number} is not a supported chainId", field="chainId")

    def get_chain_name(self, chain_id: ChainId) -> str:
        return ChainId(chain_id).name


chain_service = ChainService()
